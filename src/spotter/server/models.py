"""API Models - Pydantic models for FastAPI endpoints.

Defines request and response schemas for the Spotter REST API.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class TextEventRequest(BaseModel):
    """A text message delivered by the chat provider."""

    user_id: int = Field(description="Chat identity of the sender")
    text: str = Field(min_length=1, description="Message text")
    first_name: str = Field(default="", description="Sender's first name")
    username: str = Field(default="", description="Sender's username")


class CallbackEventRequest(BaseModel):
    """A button press delivered by the chat provider."""

    user_id: int = Field(description="Chat identity of the sender")
    payload: str = Field(min_length=1, description="Button payload, e.g. done:<workout id>")


class TurnResponse(BaseModel):
    """Replies for the sender of one event."""

    replies: list[str] = Field(description="Reply messages in order")
    step: str | None = Field(default=None, description="Dialogue step after the turn")


class HealthResponse(BaseModel):
    status: Literal["healthy", "starting"]
    version: str
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())


class SessionResponse(BaseModel):
    """Current dialogue session of a user."""

    user_id: int
    active: bool
    step: str | None = None
    data: dict[str, Any] | None = None
    updated_at: datetime | None = None


class ResetResponse(BaseModel):
    """Response model for reset endpoint."""

    success: bool
    message: str


class OutboxMessage(BaseModel):
    text: str
    has_image: bool = False


class OutboxResponse(BaseModel):
    """Messages pushed to a user by broadcasts, relays and reminders."""

    user_id: int
    messages: list[OutboxMessage]


class VersionResponse(BaseModel):
    """Response model for version endpoint."""

    version: str = Field(description="Full version string")
    major: int = Field(description="Major version number")
    minor: int = Field(description="Minor version number")
    patch: str = Field(description="Patch version (may include suffix)")
