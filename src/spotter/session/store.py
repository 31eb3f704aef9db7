"""In-memory session store and per-user turn locks.

Sessions live for the lifetime of the process only; a restart silently drops
in-flight flows.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel

from spotter.core.interfaces import Clock
from spotter.core.types import NoData, Session, UserHandle

logger = logging.getLogger(__name__)


class SessionStore:
    """Holds at most one session per user.

    Args:
        idle_timeout: Drop sessions not touched for this long. None keeps
            them until completion, cancellation or overwrite.
        clock: Time source, injectable for tests.
    """

    def __init__(
        self,
        idle_timeout: timedelta | None = None,
        clock: Clock = datetime.now,
    ) -> None:
        self._sessions: dict[UserHandle, Session] = {}
        self._idle_timeout = idle_timeout
        self._clock = clock

    def get(self, owner_id: UserHandle) -> Session | None:
        session = self._sessions.get(owner_id)
        if session is None:
            return None
        if self._is_expired(session):
            logger.info(
                f"Session for {owner_id} expired at step '{session.step}'",
                extra={"user_id": owner_id, "step": session.step},
            )
            del self._sessions[owner_id]
            return None
        return session

    def set(
        self, owner_id: UserHandle, step: str | Enum, data: BaseModel | None = None
    ) -> Session:
        """Start or replace the session for a user."""
        if isinstance(step, Enum):
            step = step.value
        session = Session(
            owner_id=owner_id,
            step=step,
            data=data if data is not None else NoData(),
            updated_at=self._clock(),
        )
        self._sessions[owner_id] = session
        logger.debug(f"Session for {owner_id} -> '{step}'", extra={"user_id": owner_id})
        return session

    def clear(self, owner_id: UserHandle) -> None:
        if self._sessions.pop(owner_id, None) is not None:
            logger.debug(f"Session for {owner_id} cleared", extra={"user_id": owner_id})

    def __len__(self) -> int:
        return len(self._sessions)

    def _is_expired(self, session: Session) -> bool:
        if self._idle_timeout is None:
            return False
        return self._clock() - session.updated_at > self._idle_timeout


class KeyedLock:
    """One asyncio lock per key; keys nobody waits on are released."""

    def __init__(self) -> None:
        self._locks: dict[UserHandle, asyncio.Lock] = {}
        self._waiters: dict[UserHandle, int] = {}

    @asynccontextmanager
    async def hold(self, key: UserHandle) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
