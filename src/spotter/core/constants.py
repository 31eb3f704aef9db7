"""Core constants and enums."""

from enum import Enum


class Step(str, Enum):
    """Names of the steps owned by registered flows."""

    ONBOARD_AGE = "edit_profile_full"
    ONBOARD_WEIGHT = "edit_profile_weight"
    ONBOARD_HEIGHT = "edit_profile_height"
    EDIT_FIELD_CHOICE = "editing_profile_field"
    EDIT_FIELD_VALUE = "editing_profile_value"
    SWITCH_PROFILE = "switch_profile"
    DELETE_PROFILE = "delete_profile"
    BROWSE_EXERCISES = "browse_exercises"
    LOG_MEAL = "log_meal"
    SET_DAILY_REMINDER = "set_daily_reminder"
    SET_WATER_REMINDERS = "set_water_reminders"
    MESSAGE_TRAINER = "message_trainer"
    REPORT_BUG = "report_bug"
    AWAIT_ADMIN_PASS = "await_admin_pass"
    ADMIN_BROADCAST = "admin_broadcast"
    ADMIN_REPLY = "admin_reply"
    PROMOTE_USER = "promote_user"
    DEMOTE_USER = "demote_user"
    REMOVE_USER = "remove_user"
    CREATE_EXERCISE = "create_exercise"
    CREATE_WORKOUT = "create_workout"
    CREATE_CHALLENGE = "create_challenge"


class FitnessLevel(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class Role(str, Enum):
    user = "user"
    admin = "admin"


class RelayKind(str, Enum):
    """Kind of a message relayed to the operators."""

    message = "message"
    feedback = "feedback"
    bug = "bug"
    privacy = "privacy"


class ProfileField(str, Enum):
    """Profile fields editable through the field editor."""

    name = "name"
    age = "age"
    weight = "weight"
    height = "height"
    fitness_level = "fitnesslevel"
    goal = "goal"
    target_date = "targetdate"
    equipment = "equipment"
    time_availability = "timeavailability"


# Fields whose value is parsed as a number
NUMERIC_FIELDS = frozenset(
    {ProfileField.age, ProfileField.weight, ProfileField.height, ProfileField.time_availability}
)

STREAK_BADGE_DAYS = 7
STREAK_BADGE = "7-day-streak"

CANCEL_TRIGGERS = frozenset({"/cancel", "Back to Main"})
