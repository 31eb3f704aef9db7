"""Per-turn context handed to flow, command and callback handlers."""

from dataclasses import dataclass
from datetime import datetime

from spotter.core.errors import AuthorizationError
from spotter.core.interfaces import Clock, IRepository
from spotter.core.types import UserHandle
from spotter.domain.mutators import Mutators
from spotter.session.elevation import ElevationStore
from spotter.session.store import SessionStore
from spotter.transport.sinks import Transport

ADMIN_ONLY = "Admin only. Use /admin."


@dataclass
class Services:
    """Process-wide collaborators shared by every turn."""

    repository: IRepository
    mutators: Mutators
    transport: Transport
    sessions: SessionStore
    elevation: ElevationStore
    clock: Clock
    admin_password: str | None = None
    fanout_concurrency: int = 10
    send_timeout: float | None = 10.0


@dataclass
class TurnContext:
    """What a handler knows about the turn it is processing."""

    user_id: UserHandle
    services: Services
    first_name: str = ""
    username: str = ""

    @property
    def repository(self) -> IRepository:
        return self.services.repository

    @property
    def mutators(self) -> Mutators:
        return self.services.mutators

    @property
    def transport(self) -> Transport:
        return self.services.transport

    @property
    def sessions(self) -> SessionStore:
        return self.services.sessions

    @property
    def elevation(self) -> ElevationStore:
        return self.services.elevation

    @property
    def is_elevated(self) -> bool:
        return self.services.elevation.is_elevated(self.user_id)

    def now(self) -> datetime:
        return self.services.clock()

    def require_elevation(self) -> None:
        """Re-check admin elevation for this turn.

        Raises:
            AuthorizationError: If the sender is not elevated right now
        """
        if not self.is_elevated:
            raise AuthorizationError(ADMIN_ONLY, user_id=self.user_id)
