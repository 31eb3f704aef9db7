"""Domain mutators invoked by flow handlers.

Every operation reads the record, applies one coherent change and saves it
once. A failed write surfaces as PersistenceError and nothing is reported
as done, so the caller's flow does not advance. Concurrent external edits
between read and save are not guarded.
"""

import logging
from collections.abc import Awaitable
from datetime import date, datetime, timedelta
from typing import Any, TypeVar

from spotter.core.constants import (
    STREAK_BADGE,
    STREAK_BADGE_DAYS,
    FitnessLevel,
    ProfileField,
    RelayKind,
    Role,
)
from spotter.core.errors import InputError, NotFoundError, PersistenceError
from spotter.core.interfaces import Clock, IRepository
from spotter.core.models import (
    Challenge,
    Exercise,
    MealEntry,
    Profile,
    RelayedMessage,
    User,
    WeightEntry,
    Workout,
    WorkoutLog,
)
from spotter.core.types import UserHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProfileValue = str | int | float | date | list[str] | FitnessLevel


def record_weight(user: User, profile: Profile, value: float, at: datetime) -> None:
    """Set the current weight and append one history entry.

    Every path that changes a profile's weight goes through here so the
    current value and the append-only log never diverge.
    """
    profile.weight_kg = value
    user.stats.weight_history.append(
        WeightEntry(profile_id=profile.id, value=value, recorded_at=at)
    )


def apply_profile_field(
    user: User, profile: Profile, field: ProfileField, value: ProfileValue, at: datetime
) -> None:
    """Assign an already-parsed value to a profile field."""
    if field is ProfileField.weight:
        record_weight(user, profile, float(value), at)  # type: ignore[arg-type]
    elif field is ProfileField.age:
        profile.age = int(value)  # type: ignore[arg-type]
    elif field is ProfileField.height:
        profile.height_cm = float(value)  # type: ignore[arg-type]
    elif field is ProfileField.time_availability:
        profile.time_availability_mins = int(value)  # type: ignore[arg-type]
    elif field is ProfileField.target_date:
        profile.goal_target_date = value  # type: ignore[assignment]
    elif field is ProfileField.equipment:
        profile.equipment = list(value)  # type: ignore[arg-type]
    elif field is ProfileField.fitness_level:
        profile.fitness_level = FitnessLevel(value)
    elif field is ProfileField.name:
        profile.name = str(value)
    elif field is ProfileField.goal:
        profile.goal = str(value)


class Mutators:
    """Operations on persisted records used by the flows.

    Args:
        repository: Persistence collaborator
        clock: Time source for timestamps
    """

    def __init__(self, repository: IRepository, clock: Clock = datetime.now) -> None:
        self.repository = repository
        self.clock = clock

    # === Users & profiles ===

    async def load_user(self, user_id: UserHandle) -> User:
        """
        Fetch a user.

        Raises:
            NotFoundError: If the user is not registered
        """
        user = await self.repository.users.get(user_id)
        if user is None:
            raise NotFoundError("Please /start first.", user_id=user_id)
        return user

    async def ensure_user(
        self, user_id: UserHandle, first_name: str = "", username: str = ""
    ) -> tuple[User, bool]:
        """
        Get a user, registering them with a default profile on first contact.

        Returns:
            Tuple of (user, created)
        """
        user = await self.repository.users.get(user_id)
        if user is not None:
            return user, False

        profile = Profile(
            name=first_name or "You",
            fitness_level=FitnessLevel.beginner,
            goal="general fitness",
            time_availability_mins=30,
        )
        user = User(
            id=user_id,
            first_name=first_name,
            username=username,
            registered_at=self.clock(),
            profiles=[profile],
            active_profile_id=profile.id,
        )
        await self._write(
            self.repository.users.create(user), "Failed to register user", user_id=user_id
        )
        logger.info(f"Registered user {user_id}", extra={"user_id": user_id})
        return user, True

    async def set_profile_field(
        self,
        user_id: UserHandle,
        profile_id: str,
        field: ProfileField,
        value: ProfileValue,
    ) -> Profile:
        """Update one profile field; weight also appends to the history log."""
        user = await self.load_user(user_id)
        profile = user.find_profile(profile_id) or user.active_profile
        if profile is None:
            raise NotFoundError("Profile not found.", user_id=user_id, profile_id=profile_id)
        apply_profile_field(user, profile, field, value, self.clock())
        await self._save_user(user)
        logger.info(
            f"Updated {field.value} for profile {profile.id}",
            extra={"user_id": user_id, "profile_id": profile.id, "field": field.value},
        )
        return profile

    async def add_profile(self, user_id: UserHandle, name: str) -> Profile:
        """Add a profile and make it the active one."""
        user = await self.load_user(user_id)
        profile = Profile(name=name or "Profile")
        user.profiles.append(profile)
        user.active_profile_id = profile.id
        await self._save_user(user)
        return profile

    async def switch_profile(self, user_id: UserHandle, profile_id: str) -> Profile:
        user = await self.load_user(user_id)
        profile = user.find_profile(profile_id)
        if profile is None:
            raise NotFoundError("That profile no longer exists.", profile_id=profile_id)
        user.active_profile_id = profile.id
        await self._save_user(user)
        return profile

    async def delete_profile(self, user_id: UserHandle, profile_id: str) -> Profile:
        """
        Delete a profile, re-pointing the active profile if needed.

        Raises:
            InputError: If it is the user's only profile
            NotFoundError: If the profile no longer exists
        """
        user = await self.load_user(user_id)
        profile = user.find_profile(profile_id)
        if profile is None:
            raise NotFoundError("That profile no longer exists.", profile_id=profile_id)
        if len(user.profiles) == 1:
            raise InputError("Cannot delete last profile.", user_id=user_id)
        user.profiles = [p for p in user.profiles if p.id != profile_id]
        if user.active_profile_id == profile_id:
            user.active_profile_id = user.profiles[0].id
        await self._save_user(user)
        return profile

    # === Logs ===

    async def log_meal(self, user_id: UserHandle, calories: float, description: str) -> MealEntry:
        user = await self.load_user(user_id)
        entry = MealEntry(
            profile_id=self._active_profile_id(user),
            calories=calories,
            description=description or "meal",
            eaten_at=self.clock(),
        )
        user.stats.meals.append(entry)
        await self._save_user(user)
        return entry

    async def log_workout_done(self, user_id: UserHandle, workout_id: str) -> User:
        """Record a completed workout, extend the streak and award badges."""
        user = await self.load_user(user_id)
        user.stats.workouts_completed.append(
            WorkoutLog(
                profile_id=self._active_profile_id(user),
                workout_id=workout_id,
                completed_at=self.clock(),
            )
        )
        user.streak += 1
        if user.streak >= STREAK_BADGE_DAYS and STREAK_BADGE not in user.badges:
            user.badges.append(STREAK_BADGE)
        await self._save_user(user)
        return user

    async def skip_workout(self, user_id: UserHandle) -> User:
        user = await self.load_user(user_id)
        user.streak = 0
        await self._save_user(user)
        return user

    # === Reminders ===

    async def set_daily_reminder(self, user_id: UserHandle, at: str) -> None:
        user = await self.load_user(user_id)
        user.reminders.workout_daily_at = at
        await self._save_user(user)

    async def set_water_reminders(self, user_id: UserHandle, times: list[str]) -> None:
        """Replace water reminder times; an empty list disables them."""
        user = await self.load_user(user_id)
        user.reminders.water_times = list(times)
        await self._save_user(user)

    async def clear_reminders(self, user_id: UserHandle) -> None:
        user = await self.load_user(user_id)
        user.reminders.workout_daily_at = None
        user.reminders.water_times = []
        await self._save_user(user)

    # === Operator relay ===

    async def relay_message(
        self, user_id: UserHandle, text: str, kind: RelayKind
    ) -> RelayedMessage:
        user = await self.repository.users.get(user_id)
        relay = RelayedMessage(
            from_id=user_id,
            profile_id=user.active_profile_id if user else None,
            text=text,
            kind=kind,
            created_at=self.clock(),
        )
        await self._write(
            self.repository.relays.create(relay), "Failed to relay message", user_id=user_id
        )
        logger.info(
            f"Relayed {kind.value} from {user_id}",
            extra={"user_id": user_id, "relay_id": relay.id, "kind": kind.value},
        )
        return relay

    async def request_data_deletion(self, user_id: UserHandle) -> RelayedMessage:
        """File a privacy request, then revoke data-collection consent.

        The request is written first so consent is never revoked without a
        deletion request reaching the operators.
        """
        user = await self.load_user(user_id)
        relay = await self.relay_message(
            user_id, "User requested data deletion", RelayKind.privacy
        )
        user.consent.data_collection = False
        await self._save_user(user)
        return relay

    async def mark_relay_read(self, relay_id: str) -> RelayedMessage:
        relay = await self.repository.relays.get(relay_id)
        if relay is None:
            raise NotFoundError("Message not found.", relay_id=relay_id)
        relay.read = True
        await self._write(
            self.repository.relays.save(relay), "Failed to update message", relay_id=relay_id
        )
        return relay

    # === Administration ===

    async def set_role(self, target_id: UserHandle, role: Role) -> User:
        user = await self.repository.users.get(target_id)
        if user is None:
            raise NotFoundError("User not found", user_id=target_id)
        user.role = role
        await self._save_user(user)
        logger.info(
            f"Set role of {target_id} to {role.value}",
            extra={"user_id": target_id, "role": role.value},
        )
        return user

    async def remove_user(self, target_id: UserHandle) -> None:
        removed = await self._write(
            self.repository.users.delete(target_id), "Failed to remove user", user_id=target_id
        )
        if not removed:
            raise NotFoundError("User not found", user_id=target_id)
        logger.info(f"Removed user {target_id}", extra={"user_id": target_id})

    async def create_exercise(self, exercise: Exercise) -> Exercise:
        return await self._write(
            self.repository.exercises.create(exercise), "Failed to create exercise"
        )

    async def create_workout(self, workout: Workout) -> Workout:
        return await self._write(
            self.repository.workouts.create(workout), "Failed to create workout"
        )

    async def create_challenge(self, challenge: Challenge) -> Challenge:
        return await self._write(
            self.repository.challenges.create(challenge), "Failed to create challenge"
        )

    # === Queries ===

    def workouts_since(self, user: User, days: int = 7) -> int:
        """Count workouts of the active profile in the last `days` days."""
        since = self.clock() - timedelta(days=days)
        profile_id = user.active_profile_id
        return sum(
            1
            for log in user.stats.workouts_completed
            if log.profile_id == profile_id and log.completed_at >= since
        )

    # === Internals ===

    async def _save_user(self, user: User) -> None:
        await self._write(self.repository.users.save(user), "Failed to save user", user_id=user.id)

    @staticmethod
    async def _write(operation: Awaitable[T], message: str, **context: Any) -> T:
        """Await a repository write, reporting any backend failure as PersistenceError."""
        try:
            return await operation
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(message, **context) from e

    @staticmethod
    def _active_profile_id(user: User) -> str:
        profile = user.active_profile
        if profile is None:
            raise NotFoundError("Set up profile first.", user_id=user.id)
        return profile.id
