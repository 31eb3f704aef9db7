"""Profile completion chain started by /start: age -> weight -> height."""

from spotter.core.constants import ProfileField, Step
from spotter.core.types import FlowOutcome, ProfileRef
from spotter.flow.context import TurnContext
from spotter.flow.parsing import parse_number, parse_whole_number
from spotter.flow.registry import FlowRegistry

AGE_PROMPT = "Send your age (number) to complete profile setup."
WEIGHT_PROMPT = "Send weight in kg (number)."
HEIGHT_PROMPT = "Send height in cm (number)."


async def collect_age(ctx: TurnContext, data: ProfileRef, text: str) -> FlowOutcome:
    age = parse_whole_number(text, "Please send a number for age.")
    profile = await ctx.mutators.set_profile_field(
        ctx.user_id, data.profile_id, ProfileField.age, age
    )
    return FlowOutcome.advance(WEIGHT_PROMPT, Step.ONBOARD_WEIGHT, ProfileRef(profile_id=profile.id))


async def collect_weight(ctx: TurnContext, data: ProfileRef, text: str) -> FlowOutcome:
    weight = parse_number(text, "Send numeric weight in kg.")
    profile = await ctx.mutators.set_profile_field(
        ctx.user_id, data.profile_id, ProfileField.weight, weight
    )
    return FlowOutcome.advance(HEIGHT_PROMPT, Step.ONBOARD_HEIGHT, ProfileRef(profile_id=profile.id))


async def collect_height(ctx: TurnContext, data: ProfileRef, text: str) -> FlowOutcome:
    height = parse_number(text, "Send numeric height in cm.")
    await ctx.mutators.set_profile_field(ctx.user_id, data.profile_id, ProfileField.height, height)
    return FlowOutcome.done("Profile updated. Use the menu.")


def register_onboarding_flows(registry: FlowRegistry) -> None:
    registry.register(Step.ONBOARD_AGE, data_type=ProfileRef)(collect_age)
    registry.register(Step.ONBOARD_WEIGHT, data_type=ProfileRef)(collect_weight)
    registry.register(Step.ONBOARD_HEIGHT, data_type=ProfileRef)(collect_height)
