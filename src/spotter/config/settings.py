"""Settings configuration models.

Global settings for administration, sessions, fan-out, scheduled jobs and
logging.
"""

from datetime import timedelta
from typing import Literal

from pydantic import BaseModel, Field, SecretStr

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
Weekday = Literal["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


class AdminConfig(BaseModel):
    """Administrator access."""

    password: SecretStr | None = Field(
        default=None,
        description="Shared admin secret. Admin login is disabled when unset.",
    )


class SessionsConfig(BaseModel):
    """Dialogue session lifetime."""

    idle_timeout_minutes: float | None = Field(
        default=None,
        gt=0,
        description="Drop sessions idle for this long. None keeps them until the flow ends.",
    )

    @property
    def idle_timeout(self) -> timedelta | None:
        if self.idle_timeout_minutes is None:
            return None
        return timedelta(minutes=self.idle_timeout_minutes)


class FanoutConfig(BaseModel):
    """Broadcast and notification delivery."""

    concurrency: int = Field(default=10, ge=1, description="Maximum sends in flight")
    send_timeout_seconds: float | None = Field(
        default=10.0, gt=0, description="Per-recipient send timeout"
    )


class SchedulerConfig(BaseModel):
    """Reminder and summary jobs."""

    enabled: bool = Field(default=False, description="Start the job scheduler with the runtime")
    timezone: str | None = Field(default=None, description="IANA timezone, server local if unset")
    weekly_summary_day: Weekday = Field(default="sun", description="Day of the weekly summary")
    weekly_summary_hour: int = Field(default=8, ge=0, le=23, description="Hour of the summary")


class LoggingConfig(BaseModel):
    level: LogLevel = Field(default="INFO", description="Log level for the spotter logger")
    file: str | None = Field(default=None, description="Rotating JSON log file, off if unset")


class SettingsConfig(BaseModel):
    """Global settings configuration."""

    admin: AdminConfig = Field(default_factory=AdminConfig)
    sessions: SessionsConfig = Field(default_factory=SessionsConfig)
    fanout: FanoutConfig = Field(default_factory=FanoutConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class SpotterConfig(BaseModel):
    """Root configuration document."""

    version: str = Field(default="1.0", description="Configuration format version")
    settings: SettingsConfig = Field(default_factory=SettingsConfig)
