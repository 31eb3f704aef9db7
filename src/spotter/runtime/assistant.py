"""Assistant runtime: wires configuration, stores, registries and jobs."""

import logging
from datetime import datetime
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from spotter.config.settings import SpotterConfig
from spotter.core.interfaces import Clock, IRepository
from spotter.core.types import InboundCallback, InboundText, Session, TurnResult, UserHandle
from spotter.dialogue.menu import build_callback_registry, build_command_registry
from spotter.dialogue.router import DialogueRouter
from spotter.domain.mutators import Mutators
from spotter.domain.seed import seed_content
from spotter.flow.context import Services
from spotter.flows import build_flow_registry
from spotter.persistence.memory import InMemoryRepository
from spotter.scheduling.jobs import ReminderJobs, build_scheduler
from spotter.session.elevation import ElevationStore
from spotter.session.store import SessionStore
from spotter.transport.sinks import BufferedTransport, Transport

logger = logging.getLogger(__name__)


class Assistant:
    """The personal-trainer assistant for one process.

    Usage:
        async with Assistant(config) as assistant:
            result = await assistant.process_text(42, "/start", first_name="Ana")
            print(result.text)

    Args:
        config: Loaded configuration (defaults when omitted).
        repository: Persistence collaborator, in-memory by default.
        transport: Outbound transport for pushes to other users, buffered by
            default.
        clock: Time source shared by sessions, mutators and jobs.
        seed: Create starter content on entry when the library is empty.
    """

    def __init__(
        self,
        config: SpotterConfig | None = None,
        *,
        repository: IRepository | None = None,
        transport: Transport | None = None,
        clock: Clock = datetime.now,
        seed: bool = True,
    ) -> None:
        self.config = config or SpotterConfig()
        settings = self.config.settings
        self.repository = repository or InMemoryRepository()
        self.transport = transport or BufferedTransport()
        self._seed = seed

        password = settings.admin.password
        self.services = Services(
            repository=self.repository,
            mutators=Mutators(self.repository, clock=clock),
            transport=self.transport,
            sessions=SessionStore(idle_timeout=settings.sessions.idle_timeout, clock=clock),
            elevation=ElevationStore(),
            clock=clock,
            admin_password=password.get_secret_value() if password else None,
            fanout_concurrency=settings.fanout.concurrency,
            send_timeout=settings.fanout.send_timeout_seconds,
        )
        self.router = DialogueRouter(
            self.services,
            flows=build_flow_registry(),
            commands=build_command_registry(),
            callbacks=build_callback_registry(),
        )
        self.jobs = ReminderJobs(self.services)
        self.scheduler: AsyncIOScheduler | None = None
        self._started = False

    async def __aenter__(self) -> "Assistant":
        """Seed content and start the scheduler when enabled."""
        if self._seed:
            await seed_content(self.repository)

        if self.config.settings.scheduler.enabled:
            self.scheduler = build_scheduler(self.jobs, self.config.settings.scheduler)
            self.scheduler.start()
            logger.info("Reminder scheduler started")

        if self.services.admin_password is None:
            logger.warning("No admin password configured; admin login is disabled")

        self._started = True
        logger.info("Assistant ready")
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None
        self._started = False

    async def process_text(
        self, user_id: UserHandle, text: str, first_name: str = "", username: str = ""
    ) -> TurnResult:
        """Process a text message and return the replies for the sender."""
        self._ensure_started()
        return await self.router.handle_text(
            InboundText(user_id=user_id, text=text, first_name=first_name, username=username)
        )

    async def process_callback(self, user_id: UserHandle, payload: str) -> TurnResult:
        """Process a button press and return the replies for the sender."""
        self._ensure_started()
        return await self.router.handle_callback(
            InboundCallback(user_id=user_id, payload=payload)
        )

    def get_session(self, user_id: UserHandle) -> Session | None:
        return self.services.sessions.get(user_id)

    def reset_session(self, user_id: UserHandle) -> bool:
        """Drop the user's session; returns whether one existed."""
        existed = self.services.sessions.get(user_id) is not None
        self.services.sessions.clear(user_id)
        return existed

    def _ensure_started(self) -> None:
        if not self._started:
            raise RuntimeError("Assistant not initialized. Use 'async with' context.")
