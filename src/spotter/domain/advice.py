"""Guidance derived from a profile: calorie and macro estimates, workout picks.

These are rough heuristics, not medical advice.
"""

import random
from dataclasses import dataclass

from spotter.core.models import Exercise, Profile, Workout

DEFAULT_WEIGHT_KG = 70.0
DEFAULT_HEIGHT_CM = 170.0
DEFAULT_AGE = 30
LIGHT_ACTIVITY_FACTOR = 1.35
PROTEIN_G_PER_KG = 1.6
FAT_CALORIE_SHARE = 0.25


@dataclass(frozen=True)
class MacroAdvice:
    calories: int
    protein_g: int
    fat_g: int
    carbs_g: int

    def render(self) -> str:
        return (
            f"Estimated daily calories: {self.calories} kcal\n"
            f"Macros:\n"
            f"• Protein: {self.protein_g}g\n"
            f"• Fat: {self.fat_g}g\n"
            f"• Carbs: {self.carbs_g}g\n"
            "(These are suggestions; adapt to your needs)"
        )


def macro_advice(profile: Profile) -> MacroAdvice:
    """Mifflin-St Jeor BMR at light activity, split into macros."""
    weight = profile.weight_kg or DEFAULT_WEIGHT_KG
    height = profile.height_cm or DEFAULT_HEIGHT_CM
    age = profile.age or DEFAULT_AGE

    bmr = 10 * weight + 6.25 * height - 5 * age + 5
    calories = round(bmr * LIGHT_ACTIVITY_FACTOR)
    protein = round(PROTEIN_G_PER_KG * weight)
    fat_calories = round(calories * FAT_CALORIE_SHARE)
    carbs_calories = calories - (fat_calories + protein * 4)
    return MacroAdvice(
        calories=calories,
        protein_g=protein,
        fat_g=round(fat_calories / 9),
        carbs_g=round(carbs_calories / 4),
    )


def pick_todays_workout(
    workouts: list[Workout], profile: Profile, rng: random.Random | None = None
) -> Workout | None:
    """First workout matching the fitness level, else a random one."""
    if not workouts:
        return None
    for workout in workouts:
        if workout.difficulty == profile.fitness_level.value:
            return workout
    return (rng or random).choice(workouts)


def render_workout(workout: Workout) -> str:
    lines = [f"Today's Workout: {workout.name}", workout.description, "Exercises:"]
    lines += [f"• {item.name} - {item.sets}x{item.reps}" for item in workout.exercises]
    lines.append(f"Press done:{workout.id} when finished or skip:{workout.id} to skip.")
    return "\n".join(lines)


def render_starter_plan(workouts: list[Workout]) -> str:
    lines = ["Your 3-day starter plan:"]
    lines += [
        f"{position}. {workout.name} - {workout.duration_mins or 30} mins"
        for position, workout in enumerate(workouts[:3], start=1)
    ]
    return "\n".join(lines)


def render_exercise(exercise: Exercise) -> str:
    return (
        f"{exercise.name}\n"
        f"Category: {exercise.category}\n"
        f"Difficulty: {exercise.difficulty}\n"
        f"Muscles: {', '.join(exercise.muscle_groups) or '-'}\n\n"
        f"{exercise.description}\n\n"
        f"Tips: {exercise.tips or '-'}"
    )
