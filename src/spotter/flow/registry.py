"""Registry mapping step names to flow handlers."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel

from spotter.core.errors import FlowError
from spotter.core.types import FlowOutcome, NoData
from spotter.flow.context import TurnContext

logger = logging.getLogger(__name__)

# Type alias for flow handlers
FlowHandler = Callable[[TurnContext, Any, str], Awaitable[FlowOutcome]]


@dataclass(frozen=True)
class FlowSpec:
    """A registered step.

    Attributes:
        step: Step name stored in the session.
        handler: Coroutine receiving (context, data, text).
        data_type: Flow data variant the step expects in the session.
        privileged: Whether the step belongs to an admin flow.
        cancellable: Whether cancellation triggers end the flow instead of
            being passed to the handler.
    """

    step: str
    handler: FlowHandler
    data_type: type[BaseModel] = NoData
    privileged: bool = False
    cancellable: bool = True


class FlowRegistry:
    """Single dispatch table for step handlers.

    Usage:
        registry = FlowRegistry()

        @registry.register(Step.LOG_MEAL)
        async def log_meal(ctx, data, text):
            return FlowOutcome.done("Meal logged.")

        spec = registry.get("log_meal")
    """

    def __init__(self) -> None:
        self._flows: dict[str, FlowSpec] = {}

    def register(
        self,
        step: str | Enum,
        *,
        data_type: type[BaseModel] = NoData,
        privileged: bool = False,
        cancellable: bool = True,
    ) -> Callable[[FlowHandler], FlowHandler]:
        """Decorator registering a handler for `step`.

        Raises:
            FlowError: If the step already has a handler
        """
        name = _step_name(step)

        def decorator(handler: FlowHandler) -> FlowHandler:
            if name in self._flows:
                raise FlowError(f"Step '{name}' already registered", step=name)
            self._flows[name] = FlowSpec(
                step=name,
                handler=handler,
                data_type=data_type,
                privileged=privileged,
                cancellable=cancellable,
            )
            logger.debug(f"Registered flow step '{name}'", extra={"step": name})
            return handler

        return decorator

    def get(self, step: str | Enum) -> FlowSpec:
        """
        Get the FlowSpec registered for a step.

        Raises:
            FlowError: If no handler owns the step
        """
        name = _step_name(step)
        if name not in self._flows:
            raise FlowError(
                f"No flow registered for step '{name}'", available=sorted(self._flows)
            )
        return self._flows[name]

    def list_steps(self) -> list[str]:
        return list(self._flows)

    def __contains__(self, step: object) -> bool:
        if isinstance(step, Enum):
            step = step.value
        return step in self._flows


def _step_name(step: str | Enum) -> str:
    return step.value if isinstance(step, Enum) else step
