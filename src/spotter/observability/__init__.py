"""Logging setup."""

from spotter.observability.logging import ContextLogger, setup_logging

__all__ = ["ContextLogger", "setup_logging"]
