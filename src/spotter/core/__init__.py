"""Core types, errors and collaborator interfaces."""

from spotter.core.errors import (
    AuthorizationError,
    ConfigError,
    FlowError,
    InputError,
    NotFoundError,
    PersistenceError,
    SpotterError,
    TransportError,
)
from spotter.core.types import FlowOutcome, InboundCallback, InboundText, Session, TurnResult

__all__ = [
    "SpotterError",
    "ConfigError",
    "FlowError",
    "InputError",
    "AuthorizationError",
    "NotFoundError",
    "PersistenceError",
    "TransportError",
    "FlowOutcome",
    "InboundText",
    "InboundCallback",
    "Session",
    "TurnResult",
]
