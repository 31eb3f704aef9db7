"""Runtime wiring."""

from spotter.runtime.assistant import Assistant

__all__ = ["Assistant"]
