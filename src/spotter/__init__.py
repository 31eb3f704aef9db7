"""Spotter - a chat-based personal-trainer assistant.

Quick start:
    from spotter import Assistant

    async with Assistant() as assistant:
        result = await assistant.process_text(42, "/start", first_name="Ana")
        print(result.text)
"""

from spotter.__version__ import __version__
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
from spotter.runtime.assistant import Assistant

__all__ = [
    "__version__",
    "Assistant",
    "SpotterError",
    "ConfigError",
    "FlowError",
    "InputError",
    "AuthorizationError",
    "NotFoundError",
    "PersistenceError",
    "TransportError",
]
