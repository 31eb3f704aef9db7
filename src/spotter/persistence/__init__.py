"""Persistence backends."""

from spotter.persistence.memory import InMemoryCollection, InMemoryRepository

__all__ = ["InMemoryCollection", "InMemoryRepository"]
