"""Reminder scheduling."""

from spotter.scheduling.jobs import ReminderJobs, build_scheduler

__all__ = ["ReminderJobs", "build_scheduler"]
