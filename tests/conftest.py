"""Shared fixtures for Spotter tests.

Everything runs in process: in-memory repository, buffered transport and a
controllable clock, so tests are deterministic and need no network.
"""

from datetime import datetime, timedelta

import pytest

from spotter.config.settings import SpotterConfig
from spotter.dialogue.menu import build_callback_registry, build_command_registry
from spotter.dialogue.router import DialogueRouter
from spotter.domain.mutators import Mutators
from spotter.flow.context import Services
from spotter.flows import build_flow_registry
from spotter.persistence.memory import InMemoryRepository
from spotter.runtime.assistant import Assistant
from spotter.session.elevation import ElevationStore
from spotter.session.store import SessionStore
from spotter.transport.sinks import BufferedTransport

ADMIN_PASSWORD = "s3cret"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 3, 4, 9, 30)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def transport() -> BufferedTransport:
    return BufferedTransport()


@pytest.fixture
def services(repository, transport, clock) -> Services:
    return Services(
        repository=repository,
        mutators=Mutators(repository, clock=clock),
        transport=transport,
        sessions=SessionStore(clock=clock),
        elevation=ElevationStore(),
        clock=clock,
        admin_password=ADMIN_PASSWORD,
        fanout_concurrency=5,
        send_timeout=1.0,
    )


@pytest.fixture
def router(services) -> DialogueRouter:
    return DialogueRouter(
        services,
        flows=build_flow_registry(),
        commands=build_command_registry(),
        callbacks=build_callback_registry(),
    )


@pytest.fixture
def config() -> SpotterConfig:
    return SpotterConfig.model_validate({"settings": {"admin": {"password": ADMIN_PASSWORD}}})


@pytest.fixture
async def assistant(config, repository, transport, clock):
    """Started assistant with seeded content and an admin password."""
    async with Assistant(config, repository=repository, transport=transport, clock=clock) as a:
        yield a
