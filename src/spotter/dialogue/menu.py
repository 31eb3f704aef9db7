"""Built-in command/menu triggers and button callbacks.

Menu entries are plain-text triggers; rendering them as keyboards is the
transport's concern.
"""

from collections.abc import Awaitable, Callable
from datetime import timedelta
from functools import wraps

from spotter.core.constants import RelayKind, Role, Step
from spotter.core.errors import InputError, NotFoundError
from spotter.core.models import Profile, User
from spotter.core.types import ExerciseChoice, ProfileChoice, ProfileFieldEdit, ProfileRef, ReplyTarget
from spotter.dialogue.commands import CallbackRegistry, CommandRegistry, Replies
from spotter.domain.advice import (
    macro_advice,
    pick_todays_workout,
    render_starter_plan,
    render_workout,
)
from spotter.flow.context import TurnContext
from spotter.flows.admin import EXERCISE_FORMAT, parse_user_id
from spotter.flows.onboarding import AGE_PROMPT
from spotter.flows.profile import FIELD_PROMPT

MAIN_MENU = (
    "Main menu: Profile, Workouts, Nutrition, Progress, Reminders, Trainer, "
    "Challenges, Settings, Help"
)
ADMIN_MENU = (
    "Admin menu: User Mgmt, Content Mgmt, Analytics, Broadcast, Feedback, Logout Admin"
)
HELP_TEXT = (
    "Help:\n"
    "• Use the menu to navigate features.\n"
    "• Send /cancel or Back to Main to leave a dialogue.\n"
    "• Admins: use /admin to login.\n"
    "• For data deletion or privacy queries, use Settings -> Request Data Deletion."
)
EXERCISE_LIST_LIMIT = 30
USER_LIST_LIMIT = 50
FEEDBACK_LIST_LIMIT = 50


def admin_only(handler: Callable[[TurnContext], Awaitable[Replies]]):
    """Reject the command unless the sender is elevated on this turn."""

    @wraps(handler)
    async def wrapper(ctx: TurnContext) -> Replies:
        ctx.require_elevation()
        return await handler(ctx)

    return wrapper


def _active_profile(user: User) -> Profile:
    profile = user.active_profile
    if profile is None:
        raise NotFoundError("Set up profile first.", user_id=user.id)
    return profile


def _numbered(names: list[str]) -> str:
    return "\n".join(f"{position}. {name}" for position, name in enumerate(names, start=1))


# === Entry & navigation ===


async def start(ctx: TurnContext) -> Replies:
    user, created = await ctx.mutators.ensure_user(ctx.user_id, ctx.first_name, ctx.username)
    name = ctx.first_name or user.first_name
    if created:
        ctx.sessions.set(
            ctx.user_id, Step.ONBOARD_AGE, ProfileRef(profile_id=_active_profile(user).id)
        )
        return [f"Welcome {name}! Profile created. Please complete your profile.", AGE_PROMPT]
    return f"Welcome back {name}! Use the menu.\n{MAIN_MENU}"


async def show_help(ctx: TurnContext) -> Replies:
    user = await ctx.repository.users.get(ctx.user_id)
    if ctx.is_elevated or (user is not None and user.role is Role.admin):
        return f"{HELP_TEXT}\n\n{ADMIN_MENU}"
    return HELP_TEXT


async def main_menu(ctx: TurnContext) -> Replies:
    return MAIN_MENU


async def nothing_to_cancel(ctx: TurnContext) -> Replies:
    return f"Nothing to cancel.\n{MAIN_MENU}"


# === Profiles ===


async def show_profiles(ctx: TurnContext) -> Replies:
    user = await ctx.mutators.load_user(ctx.user_id)
    lines = [f"Profiles: ({len(user.profiles)})"]
    for profile in user.profiles:
        marker = " (active)" if profile.id == user.active_profile_id else ""
        lines.append(
            f"• {profile.name} - {profile.fitness_level.value} - {profile.goal}{marker}"
        )
    lines.append("\nChoose: Edit Profile / Switch Profile / Add Profile / Delete Profile")
    return "\n".join(lines)


async def edit_profile(ctx: TurnContext) -> Replies:
    user = await ctx.mutators.load_user(ctx.user_id)
    ctx.sessions.set(
        ctx.user_id,
        Step.EDIT_FIELD_CHOICE,
        ProfileFieldEdit(profile_id=_active_profile(user).id),
    )
    return FIELD_PROMPT


async def start_switch_profile(ctx: TurnContext) -> Replies:
    user = await ctx.mutators.load_user(ctx.user_id)
    ctx.sessions.set(
        ctx.user_id,
        Step.SWITCH_PROFILE,
        ProfileChoice(profile_ids=[profile.id for profile in user.profiles]),
    )
    names = [f"{p.name} ({p.fitness_level.value})" for p in user.profiles]
    return f"Send profile number to switch:\n{_numbered(names)}"


async def add_profile(ctx: TurnContext) -> Replies:
    user = await ctx.mutators.load_user(ctx.user_id)
    profile = await ctx.mutators.add_profile(ctx.user_id, ctx.first_name or user.first_name)
    return (
        f'Added profile "{profile.name}" and switched to it. '
        "Use Edit Profile to complete details."
    )


async def start_delete_profile(ctx: TurnContext) -> Replies:
    user = await ctx.mutators.load_user(ctx.user_id)
    if len(user.profiles) == 1:
        return "Cannot delete last profile."
    ctx.sessions.set(
        ctx.user_id,
        Step.DELETE_PROFILE,
        ProfileChoice(profile_ids=[profile.id for profile in user.profiles]),
    )
    names = [profile.name for profile in user.profiles]
    return (
        "Send profile number to delete (cannot delete last profile).\n"
        f"{_numbered(names)}"
    )


# === Workouts ===


async def workouts_menu(ctx: TurnContext) -> Replies:
    return "Workouts menu: Today, Browse Exercises, My Plan, Back to Main"


async def todays_workout(ctx: TurnContext) -> Replies:
    user = await ctx.mutators.load_user(ctx.user_id)
    workouts = await ctx.repository.workouts.find()
    workout = pick_todays_workout(workouts, _active_profile(user))
    if workout is None:
        return "No workouts configured."
    return render_workout(workout)


async def my_plan(ctx: TurnContext) -> Replies:
    user = await ctx.mutators.load_user(ctx.user_id)
    profile = _active_profile(user)
    if any(log.profile_id == profile.id for log in user.stats.workouts_completed):
        return "Showing recent workouts (from history). Use Browse Exercises to build a plan."
    level = profile.fitness_level.value
    pool = await ctx.repository.workouts.find(lambda w: w.difficulty == level, limit=3)
    if not pool:
        pool = await ctx.repository.workouts.find(limit=3)
    if not pool:
        return "No workouts configured."
    return render_starter_plan(pool)


async def start_browse_exercises(ctx: TurnContext) -> Replies:
    exercises = await ctx.repository.exercises.find(limit=EXERCISE_LIST_LIMIT)
    if not exercises:
        return "The exercise library is empty."
    ctx.sessions.set(
        ctx.user_id,
        Step.BROWSE_EXERCISES,
        ExerciseChoice(exercise_ids=[exercise.id for exercise in exercises]),
    )
    names = [f"{e.name} - {e.category} - {e.difficulty}" for e in exercises]
    return f"Exercise Library\n{_numbered(names)}\n\nSend the exercise number to view details."


# === Nutrition ===


async def nutrition_menu(ctx: TurnContext) -> Replies:
    return "Nutrition menu: Log Meal, View Meals, Macro Advice, Water Tracker, Back to Main"


async def start_log_meal(ctx: TurnContext) -> Replies:
    await ctx.mutators.load_user(ctx.user_id)
    ctx.sessions.set(ctx.user_id, Step.LOG_MEAL)
    return "Send meal like: 600 oats + banana"


async def view_meals(ctx: TurnContext) -> Replies:
    user = await ctx.mutators.load_user(ctx.user_id)
    recent = list(reversed(user.stats.meals[-10:]))
    if not recent:
        return "No meals logged yet."
    lines = ["Recent Meals"]
    lines += [
        f"{meal.eaten_at:%Y-%m-%d}: {meal.calories:g}kcal - {meal.description}" for meal in recent
    ]
    return "\n".join(lines)


async def show_macro_advice(ctx: TurnContext) -> Replies:
    user = await ctx.mutators.load_user(ctx.user_id)
    return macro_advice(_active_profile(user)).render()


async def start_water_tracker(ctx: TurnContext) -> Replies:
    await ctx.mutators.load_user(ctx.user_id)
    ctx.sessions.set(ctx.user_id, Step.SET_WATER_REMINDERS)
    return (
        "Send water reminder times separated by comma (e.g., 10:00,14:00,18:00) "
        'or "off" to disable.'
    )


# === Progress, reminders, trainer ===


async def show_progress(ctx: TurnContext) -> Replies:
    user = await ctx.mutators.load_user(ctx.user_id)
    weights = sorted(
        (e for e in user.stats.weight_history if e.profile_id == user.active_profile_id),
        key=lambda entry: entry.recorded_at,
    )
    if not weights:
        return "No weight history yet. Log weight via Edit Profile."
    lines = ["Weight progress"]
    lines += [f"{entry.recorded_at:%Y-%m-%d}: {entry.value:g} kg" for entry in weights]
    return "\n".join(lines)


async def reminders_menu(ctx: TurnContext) -> Replies:
    return "Reminders menu: Set Daily Workout, Set Water Reminders, Remove Reminders, Back to Main"


async def start_daily_reminder(ctx: TurnContext) -> Replies:
    await ctx.mutators.load_user(ctx.user_id)
    ctx.sessions.set(ctx.user_id, Step.SET_DAILY_REMINDER)
    return "Send time like 18:30 (HH:MM) to receive daily workout reminder."


async def remove_reminders(ctx: TurnContext) -> Replies:
    await ctx.mutators.clear_reminders(ctx.user_id)
    return "Removed reminders."


async def start_message_trainer(ctx: TurnContext) -> Replies:
    ctx.sessions.set(ctx.user_id, Step.MESSAGE_TRAINER)
    return "Type your message for the trainer / admin (feedback or question)."


async def start_report(ctx: TurnContext) -> Replies:
    ctx.sessions.set(ctx.user_id, Step.REPORT_BUG)
    return "Please describe the bug or feedback. Send message now."


async def show_challenges(ctx: TurnContext) -> Replies:
    today = ctx.now().date()
    active = await ctx.repository.challenges.find(lambda c: c.is_active(today))
    if not active:
        return "No active challenges. Admin can create one from content management."
    names = [f"{c.name} - {c.start_date:%Y-%m-%d} to {c.end_date:%Y-%m-%d}" for c in active]
    return f"Active Challenges:\n{_numbered(names)}"


async def show_settings(ctx: TurnContext) -> Replies:
    return "Settings: Request Data Deletion, Back to Main"


async def request_data_deletion(ctx: TurnContext) -> Replies:
    user = await ctx.repository.users.get(ctx.user_id)
    if user is None:
        return "No account found."
    await ctx.mutators.request_data_deletion(ctx.user_id)
    return (
        "Your deletion request has been submitted to admins. "
        "We will process it manually."
    )


# === Admin ===


async def admin_login(ctx: TurnContext) -> Replies:
    if not ctx.services.admin_password:
        return "No admin password set on server."
    ctx.sessions.set(ctx.user_id, Step.AWAIT_ADMIN_PASS)
    return "Enter admin password (it will not be stored)."


async def admin_logout(ctx: TurnContext) -> Replies:
    if ctx.elevation.revoke(ctx.user_id):
        return f"Logged out of admin.\n{MAIN_MENU}"
    return "You are not admin."


@admin_only
async def user_management(ctx: TurnContext) -> Replies:
    users = await ctx.repository.users.find(limit=USER_LIST_LIMIT)
    lines = [f"Users ({len(users)}):"]
    lines += [
        f"• {u.id} - {u.first_name or '-'} - Profiles:{len(u.profiles)} - {u.role.value}"
        for u in users
    ]
    lines.append("\nPromote User / Demote User / Remove User")
    return "\n".join(lines)


def _start_admin_step(step: Step, prompt: str):
    @admin_only
    async def handler(ctx: TurnContext) -> Replies:
        ctx.sessions.set(ctx.user_id, step)
        return prompt

    handler.__name__ = f"start_{step.value}"
    return handler


@admin_only
async def content_management(ctx: TurnContext) -> Replies:
    return "Content management: Create Workout / Create Exercise / Create Challenge / View Content"


@admin_only
async def view_content(ctx: TurnContext) -> Replies:
    exercises = await ctx.repository.exercises.count()
    workouts = await ctx.repository.workouts.count()
    challenges = await ctx.repository.challenges.count()
    return f"Content counts: Exercises:{exercises} Workouts:{workouts} Challenges:{challenges}"


@admin_only
async def analytics(ctx: TurnContext) -> Replies:
    since = ctx.now() - timedelta(days=7)
    users = await ctx.repository.users.count()
    active = await ctx.repository.users.count(
        lambda u: any(log.completed_at >= since for log in u.stats.workouts_completed)
    )
    feedback = await ctx.repository.relays.count(
        lambda r: r.kind in (RelayKind.feedback, RelayKind.bug)
    )
    return (
        "Analytics:\n"
        f"Total users: {users}\n"
        f"Active last 7 days (had workout): {active}\n"
        f"Workouts available: {await ctx.repository.workouts.count()}\n"
        f"Exercises: {await ctx.repository.exercises.count()}\n"
        f"Feedback items: {feedback}"
    )


@admin_only
async def feedback_inbox(ctx: TurnContext) -> Replies:
    items = await ctx.repository.relays.find(
        lambda r: r.kind in (RelayKind.feedback, RelayKind.bug)
    )
    items.sort(key=lambda r: r.created_at, reverse=True)
    if not items:
        return "No feedback/bugs reported."
    return [
        f"From: {item.from_id}\nType: {item.kind.value}\n"
        f"At: {item.created_at:%Y-%m-%d %H:%M}{'' if item.read else ' (unread)'}\n\n"
        f"{item.text}\n\nmarkread:{item.id} | replyto:{item.from_id}"
        for item in items[:FEEDBACK_LIST_LIMIT]
    ]


# === Callbacks ===


async def workout_done(ctx: TurnContext, workout_id: str) -> Replies:
    user = await ctx.mutators.log_workout_done(ctx.user_id, workout_id)
    return f"Workout logged. Good job! Streak: {user.streak}"


async def workout_skipped(ctx: TurnContext, workout_id: str) -> Replies:
    await ctx.mutators.skip_workout(ctx.user_id)
    return "Skipped. Streak reset."


async def start_admin_reply(ctx: TurnContext, argument: str) -> Replies:
    ctx.require_elevation()
    recipient = parse_user_id(argument)
    ctx.sessions.set(ctx.user_id, Step.ADMIN_REPLY, ReplyTarget(recipient_id=recipient))
    return "Type reply to forward to user."


async def mark_read(ctx: TurnContext, relay_id: str) -> Replies:
    ctx.require_elevation()
    if not relay_id:
        raise InputError("Missing message id.")
    await ctx.mutators.mark_relay_read(relay_id)
    return "Marked read"


def register_user_commands(commands: CommandRegistry) -> None:
    commands.register("/start", description="Register or greet")(start)
    commands.register("/help", "Help")(show_help)
    commands.register("Back to Main", "/menu")(main_menu)
    commands.register("/cancel")(nothing_to_cancel)
    commands.register("Profile")(show_profiles)
    commands.register("Edit Profile")(edit_profile)
    commands.register("Switch Profile")(start_switch_profile)
    commands.register("Add Profile")(add_profile)
    commands.register("Delete Profile")(start_delete_profile)
    commands.register("Workouts")(workouts_menu)
    commands.register("Today")(todays_workout)
    commands.register("My Plan")(my_plan)
    commands.register("Browse Exercises")(start_browse_exercises)
    commands.register("Nutrition")(nutrition_menu)
    commands.register("Log Meal")(start_log_meal)
    commands.register("View Meals")(view_meals)
    commands.register("Macro Advice")(show_macro_advice)
    commands.register("Water Tracker", "Set Water Reminders")(start_water_tracker)
    commands.register("Progress")(show_progress)
    commands.register("Reminders")(reminders_menu)
    commands.register("Set Daily Workout")(start_daily_reminder)
    commands.register("Remove Reminders")(remove_reminders)
    commands.register("Trainer")(start_message_trainer)
    commands.register("/report")(start_report)
    commands.register("Challenges")(show_challenges)
    commands.register("Settings")(show_settings)
    commands.register("Request Data Deletion")(request_data_deletion)


def register_admin_commands(commands: CommandRegistry) -> None:
    commands.register("/admin")(admin_login)
    commands.register("Logout Admin")(admin_logout)
    commands.register("User Mgmt")(user_management)
    commands.register("Promote User")(
        _start_admin_step(
            Step.PROMOTE_USER,
            "Send user id to promote to admin (user will see admin menu entries).",
        )
    )
    commands.register("Demote User")(
        _start_admin_step(Step.DEMOTE_USER, "Send user id to demote (remove admin role).")
    )
    commands.register("Remove User")(
        _start_admin_step(
            Step.REMOVE_USER, "Send user id to remove user from DB (this cannot be undone here)."
        )
    )
    commands.register("Content Mgmt")(content_management)
    commands.register("Create Exercise")(
        _start_admin_step(
            Step.CREATE_EXERCISE, f'Send exercise JSON or simple text "{EXERCISE_FORMAT}"'
        )
    )
    commands.register("Create Workout")(
        _start_admin_step(
            Step.CREATE_WORKOUT,
            "Send workout JSON: {name, description, exercises:[{name,sets,reps}], "
            "difficulty, durationMins}",
        )
    )
    commands.register("Create Challenge")(
        _start_admin_step(
            Step.CREATE_CHALLENGE,
            "Send challenge JSON: {name,description,startDate(YYYY-MM-DD),endDate(YYYY-MM-DD)}",
        )
    )
    commands.register("View Content")(view_content)
    commands.register("Analytics")(analytics)
    commands.register("Broadcast")(
        _start_admin_step(Step.ADMIN_BROADCAST, "Send the broadcast message to all users (text).")
    )
    commands.register("Feedback")(feedback_inbox)


def register_callbacks(callbacks: CallbackRegistry) -> None:
    callbacks.register("done")(workout_done)
    callbacks.register("skip")(workout_skipped)
    callbacks.register("replyto")(start_admin_reply)
    callbacks.register("markread")(mark_read)


def build_command_registry() -> CommandRegistry:
    commands = CommandRegistry()
    register_user_commands(commands)
    register_admin_commands(commands)
    return commands


def build_callback_registry() -> CallbackRegistry:
    callbacks = CallbackRegistry()
    register_callbacks(callbacks)
    return callbacks
