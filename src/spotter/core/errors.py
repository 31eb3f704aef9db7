"""Core interaction errors."""

from typing import Any


class SpotterError(Exception):
    """Base class for all Spotter errors.

    Keyword arguments are kept as context and rendered after the message.
    """

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class ConfigError(SpotterError):
    """Raised when configuration is invalid."""


class FlowError(SpotterError):
    """Raised when a session points at a step no flow handles.

    This is a programming error, never a user-facing one.
    """


class InputError(SpotterError):
    """Raised when user input cannot be parsed for the current step.

    The message is the re-prompt shown to the user.
    """


class AuthorizationError(SpotterError):
    """Raised when a privileged operation is attempted without elevation."""


class NotFoundError(SpotterError):
    """Raised when a referenced user, profile or content item does not exist."""


class PersistenceError(SpotterError):
    """Raised when the persistence collaborator fails to read or write."""


class TransportError(SpotterError):
    """Raised when an outbound send fails."""
