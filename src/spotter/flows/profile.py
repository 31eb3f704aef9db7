"""Profile management flows: field editor, switch and delete."""

from spotter.core.constants import NUMERIC_FIELDS, FitnessLevel, ProfileField, Step
from spotter.core.errors import FlowError, InputError
from spotter.core.types import FlowOutcome, ProfileChoice, ProfileFieldEdit
from spotter.domain.mutators import ProfileValue
from spotter.flow.context import TurnContext
from spotter.flow.parsing import (
    parse_date,
    parse_index,
    parse_list,
    parse_number,
    parse_whole_number,
)
from spotter.flow.registry import FlowRegistry

ALLOWED_FIELDS = ", ".join(field.value for field in ProfileField)
FIELD_PROMPT = f"Which field do you want to edit? ({ALLOWED_FIELDS})"
LEVELS = ", ".join(level.value for level in FitnessLevel)


def parse_field_value(field: ProfileField, text: str) -> ProfileValue:
    """Parse raw text into the value type of `field`.

    Raises:
        InputError: With a field-specific re-prompt
    """
    if field in NUMERIC_FIELDS:
        if field in (ProfileField.age, ProfileField.time_availability):
            return parse_whole_number(text, "Send a whole number.")
        return parse_number(text, "Send a number.")
    if field is ProfileField.target_date:
        return parse_date(text)
    if field is ProfileField.equipment:
        return parse_list(text)
    if field is ProfileField.fitness_level:
        try:
            return FitnessLevel(text.strip().lower())
        except ValueError:
            raise InputError(f"Send one of: {LEVELS}", value=text) from None

    value = text.strip()
    if not value:
        raise InputError(f"Send new value for {field.value}.")
    return value


async def choose_field(ctx: TurnContext, data: ProfileFieldEdit, text: str) -> FlowOutcome:
    try:
        field = ProfileField(text.strip().lower())
    except ValueError:
        raise InputError(f"Field not recognized. Allowed: {ALLOWED_FIELDS}") from None
    return FlowOutcome.advance(
        f"Send new value for {field.value}.",
        Step.EDIT_FIELD_VALUE,
        ProfileFieldEdit(profile_id=data.profile_id, field=field),
    )


async def set_field_value(ctx: TurnContext, data: ProfileFieldEdit, text: str) -> FlowOutcome:
    if data.field is None:
        raise FlowError("Field editor reached value step without a field", user_id=ctx.user_id)
    value = parse_field_value(data.field, text)
    await ctx.mutators.set_profile_field(ctx.user_id, data.profile_id, data.field, value)
    return FlowOutcome.done("Profile updated.")


async def switch_profile(ctx: TurnContext, data: ProfileChoice, text: str) -> FlowOutcome:
    index = parse_index(text, len(data.profile_ids), "Send profile number.")
    profile = await ctx.mutators.switch_profile(ctx.user_id, data.profile_ids[index])
    return FlowOutcome.done(f"Switched to profile {profile.name}")


async def delete_profile(ctx: TurnContext, data: ProfileChoice, text: str) -> FlowOutcome:
    index = parse_index(text, len(data.profile_ids), "Invalid number.")
    await ctx.mutators.delete_profile(ctx.user_id, data.profile_ids[index])
    return FlowOutcome.done("Profile deleted.")


def register_profile_flows(registry: FlowRegistry) -> None:
    registry.register(Step.EDIT_FIELD_CHOICE, data_type=ProfileFieldEdit)(choose_field)
    registry.register(Step.EDIT_FIELD_VALUE, data_type=ProfileFieldEdit)(set_field_value)
    registry.register(Step.SWITCH_PROFILE, data_type=ProfileChoice)(switch_profile)
    registry.register(Step.DELETE_PROFILE, data_type=ProfileChoice)(delete_profile)
