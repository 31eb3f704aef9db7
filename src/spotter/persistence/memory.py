"""In-memory persistence backend.

Records are deep-copied on the way in and out so callers get the
read-modify-save semantics of a document store.
"""

import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from spotter.core.errors import PersistenceError
from spotter.core.models import Challenge, Exercise, RelayedMessage, User, Workout

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class InMemoryCollection(Generic[M]):
    """Dict-backed collection keyed by the record's `id` attribute."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._items: dict[Any, M] = {}

    async def get(self, item_id: Any) -> M | None:
        item = self._items.get(item_id)
        return item.model_copy(deep=True) if item is not None else None

    async def find(
        self, predicate: Callable[[M], bool] | None = None, limit: int | None = None
    ) -> list[M]:
        matches = [
            item.model_copy(deep=True)
            for item in self._items.values()
            if predicate is None or predicate(item)
        ]
        return matches[:limit] if limit is not None else matches

    async def create(self, item: M) -> M:
        item_id = self._id_of(item)
        if item_id in self._items:
            raise PersistenceError(
                f"Duplicate {self.name} record", collection=self.name, id=item_id
            )
        self._items[item_id] = item.model_copy(deep=True)
        logger.debug(f"Created {self.name} {item_id}")
        return item

    async def save(self, item: M) -> M:
        """Upsert the record."""
        self._items[self._id_of(item)] = item.model_copy(deep=True)
        return item

    async def delete(self, item_id: Any) -> bool:
        removed = self._items.pop(item_id, None) is not None
        if removed:
            logger.debug(f"Deleted {self.name} {item_id}")
        return removed

    async def count(self, predicate: Callable[[M], bool] | None = None) -> int:
        if predicate is None:
            return len(self._items)
        return sum(1 for item in self._items.values() if predicate(item))

    @staticmethod
    def _id_of(item: M) -> Any:
        item_id = getattr(item, "id", None)
        if item_id is None:
            raise PersistenceError(f"{type(item).__name__} has no id")
        return item_id


class InMemoryRepository:
    """Persistence collaborator backed by process memory."""

    def __init__(self) -> None:
        self.users: InMemoryCollection[User] = InMemoryCollection("user")
        self.exercises: InMemoryCollection[Exercise] = InMemoryCollection("exercise")
        self.workouts: InMemoryCollection[Workout] = InMemoryCollection("workout")
        self.challenges: InMemoryCollection[Challenge] = InMemoryCollection("challenge")
        self.relays: InMemoryCollection[RelayedMessage] = InMemoryCollection("relay")
