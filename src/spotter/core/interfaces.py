"""Core interfaces (Protocols) for the external collaborators."""

from collections.abc import Callable
from datetime import datetime
from typing import Protocol, TypeVar

from spotter.core.models import Challenge, Exercise, RelayedMessage, User, Workout
from spotter.core.types import UserHandle

T = TypeVar("T")
K = TypeVar("K", contravariant=True)


class ICollection(Protocol[K, T]):
    """One entity kind in the persistence collaborator.

    Reads return detached copies: a mutation is only visible to later reads
    after `save`. Failures raise PersistenceError.
    """

    async def get(self, item_id: K) -> T | None:
        """Find by id."""
        ...

    async def find(
        self, predicate: Callable[[T], bool] | None = None, limit: int | None = None
    ) -> list[T]:
        """Find by predicate, in insertion order."""
        ...

    async def create(self, item: T) -> T:
        """Insert a new record."""
        ...

    async def save(self, item: T) -> T:
        """Update a record in place."""
        ...

    async def delete(self, item_id: K) -> bool:
        """Delete by id; returns whether a record was removed."""
        ...

    async def count(self, predicate: Callable[[T], bool] | None = None) -> int:
        """Count records matching the predicate."""
        ...


class IRepository(Protocol):
    """Persistence collaborator."""

    users: ICollection[int, User]
    exercises: ICollection[str, Exercise]
    workouts: ICollection[str, Workout]
    challenges: ICollection[str, Challenge]
    relays: ICollection[str, RelayedMessage]


class ITransport(Protocol):
    """Outbound side of the chat transport.

    A failed send raises; callers decide whether to isolate it.
    """

    async def send_text(self, user_id: UserHandle, text: str) -> None:
        """Send a text message to a user."""
        ...

    async def send_image(self, user_id: UserHandle, image: bytes, caption: str = "") -> None:
        """Send an image to a user."""
        ...


Clock = Callable[[], datetime]
