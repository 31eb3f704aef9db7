"""Administrator flows.

The password challenge grants elevation. Every other handler here re-checks
elevation at the top of each turn, since an admin can be logged out between
two turns of the same flow.
"""

import hmac
import json
import logging
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from spotter.core.constants import Role, Step
from spotter.core.errors import InputError
from spotter.core.models import Challenge, Exercise, Workout
from spotter.core.types import FlowOutcome, NoData, ReplyTarget, UserHandle
from spotter.dispatch.fanout import fan_out
from spotter.flow.context import TurnContext
from spotter.flow.parsing import parse_list
from spotter.flow.registry import FlowRegistry

logger = logging.getLogger(__name__)

EXERCISE_FORMAT = "name | category | difficulty | muscles | equipment | tips | description"


def password_matches(attempt: str, secret: str | None) -> bool:
    """Constant-time comparison against the shared secret."""
    if not secret:
        return False
    return hmac.compare_digest(attempt.encode("utf-8"), secret.encode("utf-8"))


def parse_user_id(text: str) -> UserHandle:
    try:
        return int(text.strip())
    except ValueError:
        raise InputError("Send a numeric user id.", value=text) from None


def parse_exercise(text: str) -> Exercise:
    """Parse an exercise from JSON or the pipe-separated short form."""
    payload: Any
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        payload = None

    if not isinstance(payload, dict):
        parts = [part.strip() for part in text.split("|")]
        if len(parts) < 2:
            raise InputError(f'Invalid format. Send JSON or "{EXERCISE_FORMAT}"')
        padded = parts + [""] * (7 - len(parts))
        payload = {
            "name": padded[0],
            "category": padded[1],
            "difficulty": padded[2] or "medium",
            "muscle_groups": parse_list(padded[3]),
            "equipment_needed": parse_list(padded[4]),
            "tips": padded[5],
            "description": padded[6],
        }
    return _validate(Exercise, payload, f'Invalid format. Send JSON or "{EXERCISE_FORMAT}"')


def parse_json_object(text: str, prompt: str) -> dict[str, Any]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        raise InputError(prompt) from None
    if not isinstance(payload, dict):
        raise InputError(prompt)
    return payload


def _validate(model: type[BaseModel], payload: dict[str, Any], prompt: str) -> Any:
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise InputError(prompt, errors=e.error_count()) from None


# === Privilege gate ===


async def check_admin_password(ctx: TurnContext, data: NoData, text: str) -> FlowOutcome:
    # The attempt itself is never logged
    if password_matches(text.strip(), ctx.services.admin_password):
        ctx.elevation.grant(ctx.user_id)
        return FlowOutcome.done("Admin access granted")
    logger.warning(f"Failed admin login from {ctx.user_id}", extra={"user_id": ctx.user_id})
    return FlowOutcome.done("Wrong password")


# === Messaging ===


async def broadcast(ctx: TurnContext, data: NoData, text: str) -> FlowOutcome:
    ctx.require_elevation()
    message = text.strip()
    if not message:
        raise InputError("Send the broadcast message to all users (text).")

    users = await ctx.repository.users.find()
    report = await fan_out(
        [user.id for user in users],
        lambda user_id: ctx.transport.send_text(user_id, f"Admin Broadcast:\n\n{message}"),
        concurrency=ctx.services.fanout_concurrency,
        timeout=ctx.services.send_timeout,
    )
    logger.info(
        f"Broadcast by {ctx.user_id}: sent {report.sent}, failed {report.failed}",
        extra={"user_id": ctx.user_id, "sent": report.sent, "failed": report.failed},
    )
    return FlowOutcome.done(f"Broadcast sent to {report.sent} users, failed {report.failed}.")


async def reply_to_user(ctx: TurnContext, data: ReplyTarget, text: str) -> FlowOutcome:
    ctx.require_elevation()
    try:
        await ctx.transport.send_text(data.recipient_id, f"Trainer reply:\n\n{text}")
    except Exception as e:
        logger.warning(
            f"Failed to forward reply to {data.recipient_id}: {e}",
            extra={"user_id": ctx.user_id, "recipient_id": data.recipient_id},
        )
        return FlowOutcome.done(f"Failed to forward: {e}")
    return FlowOutcome.done("Reply forwarded.")


# === User management ===


async def promote_user(ctx: TurnContext, data: NoData, text: str) -> FlowOutcome:
    ctx.require_elevation()
    target = parse_user_id(text)
    await ctx.mutators.set_role(target, Role.admin)
    return FlowOutcome.done(f"Promoted {target} to admin.")


async def demote_user(ctx: TurnContext, data: NoData, text: str) -> FlowOutcome:
    ctx.require_elevation()
    target = parse_user_id(text)
    await ctx.mutators.set_role(target, Role.user)
    return FlowOutcome.done(f"Demoted {target}.")


async def remove_user(ctx: TurnContext, data: NoData, text: str) -> FlowOutcome:
    ctx.require_elevation()
    target = parse_user_id(text)
    await ctx.mutators.remove_user(target)
    ctx.sessions.clear(target)
    return FlowOutcome.done(f"Removed user {target}.")


# === Content ===


async def create_exercise(ctx: TurnContext, data: NoData, text: str) -> FlowOutcome:
    ctx.require_elevation()
    exercise = parse_exercise(text)
    await ctx.mutators.create_exercise(exercise)
    return FlowOutcome.done(f"Exercise created: {exercise.name}.")


async def create_workout(ctx: TurnContext, data: NoData, text: str) -> FlowOutcome:
    ctx.require_elevation()
    prompt = "Send valid JSON for workout"
    workout: Workout = _validate(Workout, parse_json_object(text, prompt), prompt)
    workout.author = workout.author or str(ctx.user_id)
    await ctx.mutators.create_workout(workout)
    return FlowOutcome.done(f"Workout created: {workout.name}.")


async def create_challenge(ctx: TurnContext, data: NoData, text: str) -> FlowOutcome:
    ctx.require_elevation()
    prompt = "Send valid JSON for challenge"
    challenge: Challenge = _validate(Challenge, parse_json_object(text, prompt), prompt)
    if challenge.end_date < challenge.start_date:
        raise InputError("Challenge end date must not be before its start date.")
    await ctx.mutators.create_challenge(challenge)
    return FlowOutcome.done(f"Challenge created: {challenge.name}.")


def register_admin_flows(registry: FlowRegistry) -> None:
    registry.register(Step.AWAIT_ADMIN_PASS, cancellable=False)(check_admin_password)
    registry.register(Step.ADMIN_BROADCAST, privileged=True)(broadcast)
    registry.register(Step.ADMIN_REPLY, data_type=ReplyTarget, privileged=True)(reply_to_user)
    registry.register(Step.PROMOTE_USER, privileged=True)(promote_user)
    registry.register(Step.DEMOTE_USER, privileged=True)(demote_user)
    registry.register(Step.REMOVE_USER, privileged=True)(remove_user)
    registry.register(Step.CREATE_EXERCISE, privileged=True)(create_exercise)
    registry.register(Step.CREATE_WORKOUT, privileged=True)(create_workout)
    registry.register(Step.CREATE_CHALLENGE, privileged=True)(create_challenge)
