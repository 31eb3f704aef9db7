"""Single-turn logging flows: meals, reminders and library lookups."""

from spotter.core.constants import Step
from spotter.core.errors import NotFoundError
from spotter.core.types import ExerciseChoice, FlowOutcome, NoData
from spotter.domain.advice import render_exercise
from spotter.flow.context import TurnContext
from spotter.flow.parsing import parse_clock_time, parse_clock_times, parse_index, parse_number
from spotter.flow.registry import FlowRegistry

MEAL_PROMPT = 'Start with calories, e.g., "600 oats + banana"'


async def log_meal(ctx: TurnContext, data: NoData, text: str) -> FlowOutcome:
    calories_token, _, description = text.strip().partition(" ")
    calories = parse_number(calories_token, MEAL_PROMPT)
    await ctx.mutators.log_meal(ctx.user_id, calories, description.strip() or "meal")
    return FlowOutcome.done("Meal logged.")


async def set_daily_reminder(ctx: TurnContext, data: NoData, text: str) -> FlowOutcome:
    at = parse_clock_time(text)
    await ctx.mutators.set_daily_reminder(ctx.user_id, at)
    return FlowOutcome.done(f"Daily reminder set at {at} (server time).")


async def set_water_reminders(ctx: TurnContext, data: NoData, text: str) -> FlowOutcome:
    if text.strip().lower() == "off":
        await ctx.mutators.set_water_reminders(ctx.user_id, [])
        return FlowOutcome.done("Water reminders disabled.")
    times = parse_clock_times(text)
    await ctx.mutators.set_water_reminders(ctx.user_id, times)
    return FlowOutcome.done(f"Water reminders set: {', '.join(times)}.")


async def browse_exercises(ctx: TurnContext, data: ExerciseChoice, text: str) -> FlowOutcome:
    index = parse_index(
        text, len(data.exercise_ids), "Send exercise number to view details."
    )
    exercise = await ctx.repository.exercises.get(data.exercise_ids[index])
    if exercise is None:
        raise NotFoundError("That exercise is no longer available.")
    return FlowOutcome.done(render_exercise(exercise))


def register_tracking_flows(registry: FlowRegistry) -> None:
    registry.register(Step.LOG_MEAL)(log_meal)
    registry.register(Step.SET_DAILY_REMINDER)(set_daily_reminder)
    registry.register(Step.SET_WATER_REMINDERS)(set_water_reminders)
    registry.register(Step.BROWSE_EXERCISES, data_type=ExerciseChoice)(browse_exercises)
