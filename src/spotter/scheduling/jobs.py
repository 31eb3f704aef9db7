"""Scheduled reminder and summary jobs.

Every job is best-effort: it fans out over the user collection and only logs
recipients that could not be reached.
"""

from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from spotter.config.settings import SchedulerConfig
from spotter.dispatch.fanout import FanoutReport, fan_out
from spotter.domain.mutators import Mutators
from spotter.flow.context import Services
from spotter.observability.logging import ContextLogger

logger = ContextLogger(__name__)

WORKOUT_REMINDER = "Time for your workout! Open Workouts -> Today."
WATER_REMINDER = "Time to drink water."


class ReminderJobs:
    """Job bodies, independent of the scheduler that triggers them."""

    def __init__(self, services: Services) -> None:
        self.services = services

    @property
    def mutators(self) -> Mutators:
        return self.services.mutators

    async def reminder_tick(self, now: datetime | None = None) -> dict[str, FanoutReport]:
        """Send workout and water reminders due at the current minute.

        Workout reminders honour the user's reminders notification preference.
        """
        now = now or self.services.clock()
        minute = now.strftime("%H:%M")
        users = self.services.repository.users

        workout_due = await users.find(
            lambda u: u.reminders.workout_daily_at == minute
            and u.preferences.notifications.reminders
        )
        water_due = await users.find(lambda u: minute in u.reminders.water_times)

        reports = {
            "workout": await self._send_all([u.id for u in workout_due], WORKOUT_REMINDER),
            "water": await self._send_all([u.id for u in water_due], WATER_REMINDER),
        }
        if workout_due or water_due:
            logger.with_context(job="reminder_tick", minute=minute).info(
                f"Reminder tick {minute}: workout {reports['workout'].sent}, "
                f"water {reports['water'].sent}"
            )
        return reports

    async def weekly_summary(self, now: datetime | None = None) -> FanoutReport:
        """Tell every user how many workouts the active profile did this week."""
        users = await self.services.repository.users.find()
        counts = {user.id: self.mutators.workouts_since(user, days=7) for user in users}

        report = await fan_out(
            list(counts),
            lambda user_id: self.services.transport.send_text(
                user_id,
                f"Weekly summary: You completed {counts[user_id]} workouts this week. "
                "Keep going!",
            ),
            concurrency=self.services.fanout_concurrency,
            timeout=self.services.send_timeout,
        )
        logger.with_context(job="weekly_summary", sent=report.sent, failed=report.failed).info(
            f"Weekly summary sent to {report.sent} users, failed {report.failed}"
        )
        return report

    async def _send_all(self, recipients: list[int], text: str) -> FanoutReport:
        return await fan_out(
            recipients,
            lambda user_id: self.services.transport.send_text(user_id, text),
            concurrency=self.services.fanout_concurrency,
            timeout=self.services.send_timeout,
        )


def build_scheduler(jobs: ReminderJobs, settings: SchedulerConfig) -> AsyncIOScheduler:
    """Create (but do not start) the scheduler for the reminder jobs."""
    scheduler_kwargs = {"timezone": settings.timezone} if settings.timezone else {}
    scheduler = AsyncIOScheduler(**scheduler_kwargs)
    scheduler.add_job(
        jobs.reminder_tick,
        "cron",
        minute="*",
        id="reminder_tick",
        coalesce=True,
        max_instances=1,
    )
    scheduler.add_job(
        jobs.weekly_summary,
        "cron",
        day_of_week=settings.weekly_summary_day,
        hour=settings.weekly_summary_hour,
        minute=0,
        id="weekly_summary",
        coalesce=True,
    )
    return scheduler
