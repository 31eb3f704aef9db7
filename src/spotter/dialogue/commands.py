"""Ordered registries for command/menu triggers and button callbacks."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from spotter.core.errors import ConfigError
from spotter.flow.context import TurnContext

logger = logging.getLogger(__name__)

Replies = str | list[str]
CommandHandler = Callable[[TurnContext], Awaitable[Replies]]
CallbackHandler = Callable[[TurnContext, str], Awaitable[Replies]]


@dataclass(frozen=True)
class Command:
    trigger: str
    handler: CommandHandler
    description: str = ""


class CommandRegistry:
    """Exact-match text triggers evaluated in registration order.

    A trigger can only be registered once; duplicates are a configuration
    error rather than a silent shadowing.
    """

    def __init__(self) -> None:
        self._commands: list[Command] = []
        self._triggers: set[str] = set()

    def register(
        self, *triggers: str, description: str = ""
    ) -> Callable[[CommandHandler], CommandHandler]:
        def decorator(handler: CommandHandler) -> CommandHandler:
            for trigger in triggers:
                if trigger in self._triggers:
                    raise ConfigError(f"Duplicate command trigger '{trigger}'", trigger=trigger)
                self._triggers.add(trigger)
                self._commands.append(Command(trigger, handler, description))
                logger.debug(f"Registered command '{trigger}'")
            return handler

        return decorator

    def match(self, text: str) -> Command | None:
        """First command whose trigger equals the stripped text."""
        candidate = text.strip()
        for command in self._commands:
            if command.trigger == candidate:
                return command
        return None

    def triggers(self) -> list[str]:
        return [command.trigger for command in self._commands]

    def __contains__(self, trigger: object) -> bool:
        return trigger in self._triggers


class CallbackRegistry:
    """Button payloads of the form `<prefix>:<argument>`."""

    def __init__(self) -> None:
        self._handlers: dict[str, CallbackHandler] = {}

    def register(self, prefix: str) -> Callable[[CallbackHandler], CallbackHandler]:
        def decorator(handler: CallbackHandler) -> CallbackHandler:
            if prefix in self._handlers:
                raise ConfigError(f"Duplicate callback prefix '{prefix}'", prefix=prefix)
            self._handlers[prefix] = handler
            return handler

        return decorator

    def match(self, payload: str) -> tuple[CallbackHandler, str] | None:
        prefix, separator, argument = payload.partition(":")
        if not separator or prefix not in self._handlers:
            return None
        return self._handlers[prefix], argument

    def prefixes(self) -> list[str]:
        return list(self._handlers)
