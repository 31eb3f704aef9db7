"""Starter content for an empty library."""

import logging

from spotter.core.interfaces import IRepository
from spotter.core.models import Exercise, ExerciseItem, Workout

logger = logging.getLogger(__name__)

STARTER_EXERCISES = [
    Exercise(
        name="Push-up",
        description="Push-up description...",
        category="strength",
        muscle_groups=["chest", "triceps"],
        difficulty="beginner",
        equipment_needed=["none"],
        tips="Keep body straight",
    ),
    Exercise(
        name="Squat",
        description="Squat description...",
        category="strength",
        muscle_groups=["legs"],
        difficulty="beginner",
        equipment_needed=["none"],
        tips="Knees behind toes",
    ),
    Exercise(
        name="Plank",
        description="Plank core hold",
        category="core",
        muscle_groups=["core"],
        difficulty="beginner",
        equipment_needed=["none"],
        tips="Keep straight",
    ),
]


async def seed_content(repository: IRepository) -> None:
    """Create starter exercises and a beginner workout when none exist."""
    if await repository.exercises.count() == 0:
        for exercise in STARTER_EXERCISES:
            await repository.exercises.create(exercise.model_copy(deep=True))
        logger.info(f"Seeded {len(STARTER_EXERCISES)} exercises")

    if await repository.workouts.count() == 0:
        exercises = await repository.exercises.find()
        await repository.workouts.create(
            Workout(
                name="Beginner Full Body",
                description="3x/week full body",
                exercises=[
                    ExerciseItem(
                        name=exercise.name,
                        sets=3,
                        reps="8-12",
                        equipment=exercise.equipment_needed,
                        muscle_groups=exercise.muscle_groups,
                        difficulty=exercise.difficulty,
                        demo_url=exercise.demo_url,
                        tips=exercise.tips,
                    )
                    for exercise in exercises
                ],
                difficulty="beginner",
                duration_mins=30,
                bodyweight_only=True,
                tags=["fullbody"],
            )
        )
        logger.info("Seeded workouts")
