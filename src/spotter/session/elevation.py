"""Set of users currently elevated to administrator."""

import logging

from spotter.core.types import UserHandle

logger = logging.getLogger(__name__)


class ElevationStore:
    """Process-wide admin elevation.

    Membership never expires; it is removed only by `revoke`.
    """

    def __init__(self) -> None:
        self._members: set[UserHandle] = set()

    def grant(self, user_id: UserHandle) -> None:
        self._members.add(user_id)
        logger.info(f"Elevated {user_id} to admin", extra={"user_id": user_id})

    def revoke(self, user_id: UserHandle) -> bool:
        """Remove elevation; returns whether the user was elevated."""
        if user_id in self._members:
            self._members.discard(user_id)
            logger.info(f"Revoked admin elevation for {user_id}", extra={"user_id": user_id})
            return True
        return False

    def is_elevated(self, user_id: UserHandle) -> bool:
        return user_id in self._members

    def members(self) -> list[UserHandle]:
        return sorted(self._members)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._members
