"""Outbound batch delivery."""

from spotter.dispatch.fanout import FanoutReport, fan_out

__all__ = ["FanoutReport", "fan_out"]
