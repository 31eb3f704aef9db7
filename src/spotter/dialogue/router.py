"""Dialogue router: one inbound event in, replies out.

A turn is resolved in this order:

1. Cancellation triggers, when a cancellable session exists.
2. The active session's step handler (a session is modal: menu triggers are
   handed to the step as ordinary text).
3. Registered commands.
4. A fallback reply.

Turns for the same user are serialised; different users run concurrently.
"""

import logging

from spotter.core.constants import CANCEL_TRIGGERS
from spotter.core.errors import (
    AuthorizationError,
    FlowError,
    InputError,
    NotFoundError,
    PersistenceError,
)
from spotter.core.types import (
    FlowOutcome,
    InboundCallback,
    InboundText,
    Session,
    Transition,
    TurnResult,
    UserHandle,
)
from spotter.dialogue.commands import CallbackRegistry, CommandRegistry, Replies
from spotter.flow.context import ADMIN_ONLY, Services, TurnContext
from spotter.flow.registry import FlowRegistry
from spotter.session.store import KeyedLock

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I did not understand that. Use the menu or /help."
CANCELLED_REPLY = "Cancelled. Back to main menu."
SAVE_FAILED_REPLY = "Could not save your changes, please try again."


class DialogueRouter:
    """Routes text messages and button callbacks for every user.

    Args:
        services: Shared collaborators (persistence, transport, stores).
        flows: Step handlers for modal sessions.
        commands: Menu and slash-command triggers.
        callbacks: Button payload handlers.
    """

    def __init__(
        self,
        services: Services,
        flows: FlowRegistry,
        commands: CommandRegistry,
        callbacks: CallbackRegistry,
    ) -> None:
        self.services = services
        self.flows = flows
        self.commands = commands
        self.callbacks = callbacks
        self._locks = KeyedLock()

    async def handle_text(self, message: InboundText) -> TurnResult:
        """Process one text message.

        Raises:
            FlowError: If the session names an unknown step or carries the
                wrong data variant
        """
        ctx = TurnContext(
            user_id=message.user_id,
            services=self.services,
            first_name=message.first_name,
            username=message.username,
        )
        async with self._locks.hold(message.user_id):
            replies = await self._route_text(ctx, message.text)
            return TurnResult(replies=replies, step=self._current_step(message.user_id))

    async def handle_callback(self, callback: InboundCallback) -> TurnResult:
        """Process one button press. Unknown payloads are acknowledged silently."""
        ctx = TurnContext(user_id=callback.user_id, services=self.services)
        async with self._locks.hold(callback.user_id):
            match = self.callbacks.match(callback.payload)
            if match is None:
                logger.debug(
                    f"Ignoring unknown callback '{callback.payload}'",
                    extra={"user_id": callback.user_id},
                )
                replies: list[str] = []
            else:
                handler, argument = match
                replies = await self._guarded(ctx, None, lambda: handler(ctx, argument))
            return TurnResult(replies=replies, step=self._current_step(callback.user_id))

    async def _route_text(self, ctx: TurnContext, text: str) -> list[str]:
        session = self.services.sessions.get(ctx.user_id)

        if session is not None:
            spec = self.flows.get(session.step)
            if spec.cancellable and text.strip() in CANCEL_TRIGGERS:
                self.services.sessions.clear(ctx.user_id)
                logger.info(
                    f"User {ctx.user_id} cancelled step '{session.step}'",
                    extra={"user_id": ctx.user_id, "step": session.step},
                )
                return [CANCELLED_REPLY]
            return await self._guarded(ctx, session, lambda: self._run_step(ctx, session, text))

        command = self.commands.match(text)
        if command is not None:
            return await self._guarded(ctx, None, lambda: command.handler(ctx))

        return [FALLBACK_REPLY]

    async def _run_step(self, ctx: TurnContext, session: Session, text: str) -> Replies:
        spec = self.flows.get(session.step)
        if not isinstance(session.data, spec.data_type):
            raise FlowError(
                f"Step '{session.step}' expects {spec.data_type.__name__}",
                step=session.step,
                got=type(session.data).__name__,
            )
        if spec.privileged:
            ctx.require_elevation()
        outcome = await spec.handler(ctx, session.data, text)
        self._apply(ctx.user_id, session, outcome)
        return outcome.reply

    def _apply(self, user_id: UserHandle, session: Session, outcome: FlowOutcome) -> None:
        sessions = self.services.sessions
        if outcome.transition is Transition.done:
            # A handler may have started a new session of its own
            if sessions.get(user_id) is session:
                sessions.clear(user_id)
        elif outcome.transition is Transition.advance:
            if outcome.next_step not in self.flows:
                raise FlowError(
                    f"Step '{session.step}' advanced to unknown step '{outcome.next_step}'",
                    step=session.step,
                )
            sessions.set(user_id, outcome.next_step, outcome.data)

    async def _guarded(self, ctx: TurnContext, session: Session | None, call) -> list[str]:
        """Run a handler and map domain errors to replies.

        Input and persistence failures keep the session as it was so the user
        can retry; a vanished record ends the flow.
        """
        try:
            replies = await call()
        except InputError as e:
            return [e.message]
        except AuthorizationError:
            return [ADMIN_ONLY]
        except NotFoundError as e:
            if session is not None:
                self.services.sessions.clear(ctx.user_id)
            return [e.message]
        except PersistenceError as e:
            logger.error(
                f"Persistence failure for user {ctx.user_id}: {e}",
                extra={"user_id": ctx.user_id, "step": session.step if session else None},
            )
            return [SAVE_FAILED_REPLY]
        if isinstance(replies, str):
            return [replies]
        return list(replies)

    def _current_step(self, user_id: UserHandle) -> str | None:
        session = self.services.sessions.get(user_id)
        return session.step if session else None
