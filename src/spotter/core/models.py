"""Persistent domain records.

These are the shapes exchanged with the persistence collaborator. A user
embeds its profiles and append-only stats logs.
"""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from spotter.core.constants import FitnessLevel, RelayKind, Role


# Content accepts camelCase keys from admin-submitted JSON
CONTENT_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def new_id() -> str:
    """Generate an opaque record id."""
    return uuid.uuid4().hex


class Profile(BaseModel):
    """One fitness profile; a user may own several."""

    id: str = Field(default_factory=new_id)
    name: str = "You"
    age: int | None = None
    weight_kg: float | None = None
    height_cm: float | None = None
    fitness_level: FitnessLevel = FitnessLevel.beginner
    goal: str = "general fitness"
    goal_target_date: date | None = None
    equipment: list[str] = Field(default_factory=list)
    time_availability_mins: int | None = None
    created_at: datetime = Field(default_factory=datetime.now)


class WeightEntry(BaseModel):
    profile_id: str
    value: float
    recorded_at: datetime


class MealEntry(BaseModel):
    profile_id: str
    calories: float
    description: str
    eaten_at: datetime


class WorkoutLog(BaseModel):
    profile_id: str
    workout_id: str
    completed_at: datetime


class MeasurementEntry(BaseModel):
    profile_id: str
    measurements: dict[str, float]
    recorded_at: datetime


class Stats(BaseModel):
    weight_history: list[WeightEntry] = Field(default_factory=list)
    body_measurements: list[MeasurementEntry] = Field(default_factory=list)
    workouts_completed: list[WorkoutLog] = Field(default_factory=list)
    meals: list[MealEntry] = Field(default_factory=list)


class Reminders(BaseModel):
    workout_daily_at: str | None = Field(default=None, description="HH:MM")
    water_times: list[str] = Field(default_factory=list)


class NotificationPreferences(BaseModel):
    reminders: bool = True
    broadcast: bool = True


class Preferences(BaseModel):
    language: str = "en"
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)


class Consent(BaseModel):
    data_collection: bool = True


class User(BaseModel):
    """A registered chat user, keyed by chat handle."""

    id: int
    first_name: str = ""
    username: str = ""
    registered_at: datetime = Field(default_factory=datetime.now)
    profiles: list[Profile] = Field(default_factory=list)
    active_profile_id: str | None = None
    consent: Consent = Field(default_factory=Consent)
    reminders: Reminders = Field(default_factory=Reminders)
    streak: int = 0
    badges: list[str] = Field(default_factory=list)
    stats: Stats = Field(default_factory=Stats)
    preferences: Preferences = Field(default_factory=Preferences)
    role: Role = Role.user

    def find_profile(self, profile_id: str | None) -> Profile | None:
        for profile in self.profiles:
            if profile.id == profile_id:
                return profile
        return None

    @property
    def active_profile(self) -> Profile | None:
        """The active profile, falling back to the first one."""
        return self.find_profile(self.active_profile_id) or (
            self.profiles[0] if self.profiles else None
        )

    def mention(self) -> str:
        if self.username:
            return f"@{self.username}"
        return self.first_name or "user"


class ExerciseItem(BaseModel):
    """An exercise as embedded in a workout."""

    model_config = CONTENT_CONFIG

    name: str
    sets: int = 3
    reps: str = "8-12"
    equipment: list[str] = Field(default_factory=list)
    muscle_groups: list[str] = Field(default_factory=list)
    difficulty: str | None = None
    demo_url: str = ""
    tips: str = ""


class Exercise(BaseModel):
    model_config = CONTENT_CONFIG

    id: str = Field(default_factory=new_id)
    name: str
    description: str = ""
    category: str = "strength"
    muscle_groups: list[str] = Field(default_factory=list)
    difficulty: str = "medium"
    equipment_needed: list[str] = Field(default_factory=list)
    tips: str = ""
    demo_url: str = ""
    created_at: datetime = Field(default_factory=datetime.now)


class Workout(BaseModel):
    model_config = CONTENT_CONFIG

    id: str = Field(default_factory=new_id)
    name: str
    description: str = ""
    exercises: list[ExerciseItem] = Field(default_factory=list)
    difficulty: str = "beginner"
    duration_mins: int = 30
    bodyweight_only: bool = False
    tags: list[str] = Field(default_factory=list)
    author: str = ""
    created_at: datetime = Field(default_factory=datetime.now)


class Challenge(BaseModel):
    model_config = CONTENT_CONFIG

    id: str = Field(default_factory=new_id)
    name: str
    description: str = ""
    start_date: date
    end_date: date
    participants: list[int] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

    def is_active(self, today: date) -> bool:
        return self.start_date <= today <= self.end_date


class RelayedMessage(BaseModel):
    """Inbound user text destined for a human operator."""

    id: str = Field(default_factory=new_id)
    from_id: int
    profile_id: str | None = None
    text: str
    kind: RelayKind = RelayKind.message
    read: bool = False
    created_at: datetime = Field(default_factory=datetime.now)
