"""Ephemeral per-user state: dialogue sessions and admin elevation."""

from spotter.session.elevation import ElevationStore
from spotter.session.store import KeyedLock, SessionStore

__all__ = ["SessionStore", "ElevationStore", "KeyedLock"]
