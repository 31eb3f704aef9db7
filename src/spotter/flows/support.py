"""Operator relay flows: message the trainer, report a bug."""

from spotter.core.constants import RelayKind, Step
from spotter.core.errors import InputError
from spotter.core.models import User
from spotter.core.types import FlowOutcome, NoData
from spotter.dispatch.fanout import FanoutReport, fan_out
from spotter.flow.context import TurnContext
from spotter.flow.registry import FlowRegistry


def sender_label(ctx: TurnContext, user: User | None) -> str:
    if user is not None:
        return user.mention()
    if ctx.username:
        return f"@{ctx.username}"
    return ctx.first_name or "user"


async def notify_admins(ctx: TurnContext, text: str) -> FanoutReport:
    """Best-effort notice to every elevated admin; failures are only logged."""
    return await fan_out(
        ctx.elevation.members(),
        lambda admin_id: ctx.transport.send_text(admin_id, text),
        concurrency=ctx.services.fanout_concurrency,
        timeout=ctx.services.send_timeout,
    )


async def message_trainer(ctx: TurnContext, data: NoData, text: str) -> FlowOutcome:
    body = text.strip()
    if not body:
        raise InputError("Type your message for the trainer.")
    relay = await ctx.mutators.relay_message(ctx.user_id, body, RelayKind.message)
    user = await ctx.repository.users.get(ctx.user_id)
    await notify_admins(
        ctx,
        f"Message from {sender_label(ctx, user)}:\n{body}\n\n"
        f"Reply: replyto:{relay.from_id}",
    )
    return FlowOutcome.done("Message sent to trainer/admin. They will reply via admin panel.")


async def report_bug(ctx: TurnContext, data: NoData, text: str) -> FlowOutcome:
    body = text.strip()
    if not body:
        raise InputError("Please describe the bug or feedback.")
    await ctx.mutators.relay_message(ctx.user_id, body, RelayKind.bug)
    user = await ctx.repository.users.get(ctx.user_id)
    await notify_admins(ctx, f"Bug reported by {sender_label(ctx, user)}:\n{body}")
    return FlowOutcome.done("Thanks, bug report submitted.")


def register_support_flows(registry: FlowRegistry) -> None:
    registry.register(Step.MESSAGE_TRAINER)(message_trainer)
    registry.register(Step.REPORT_BUG)(report_bug)
