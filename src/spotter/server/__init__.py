"""HTTP surface."""

from spotter.server.api import create_app

__all__ = ["create_app"]
