"""Spotter FastAPI Application.

Exposes the assistant over HTTP so a chat-provider webhook (or a test
harness) can deliver text messages and button presses.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Literal

from fastapi import APIRouter, FastAPI, HTTPException, Request

from spotter.__version__ import __version__, get_version_info
from spotter.config.loader import ConfigLoader
from spotter.observability.logging import setup_logging
from spotter.runtime.assistant import Assistant
from spotter.server.dependencies import AssistantDep
from spotter.server.errors import global_exception_handler
from spotter.server.models import (
    CallbackEventRequest,
    HealthResponse,
    OutboxMessage,
    OutboxResponse,
    ResetResponse,
    SessionResponse,
    TextEventRequest,
    TurnResponse,
    VersionResponse,
)
from spotter.transport.sinks import BufferedTransport

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_assistant() -> Assistant:
    config_path = os.environ.get("SPOTTER_CONFIG_PATH")
    if not config_path and os.path.exists("spotter.yaml"):
        config_path = "spotter.yaml"
    if not config_path:
        logger.warning("SPOTTER_CONFIG_PATH not set and spotter.yaml not found; using defaults")
    else:
        logger.info(f"Loading config from {config_path}")
    config = ConfigLoader.load(config_path)
    setup_logging(config.settings.logging.level, config.settings.logging.file)
    return Assistant(config)


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Liveness probe."""
    assistant = getattr(request.app.state, "assistant", None)
    status: Literal["healthy", "starting"] = "healthy" if assistant else "starting"
    return HealthResponse(status=status, version=__version__, timestamp=datetime.now().isoformat())


@router.get("/version", response_model=VersionResponse)
def get_version() -> VersionResponse:
    """Get detailed version information."""
    info = get_version_info()
    return VersionResponse(
        version=str(info["full"]),
        major=int(info["major"]),
        minor=int(info["minor"]),
        patch=str(info["patch"]),
    )


@router.post("/events/text", response_model=TurnResponse)
async def post_text(event: TextEventRequest, assistant: AssistantDep) -> TurnResponse:
    """Process a text message and return the replies for its sender."""
    result = await assistant.process_text(
        event.user_id, event.text, first_name=event.first_name, username=event.username
    )
    return TurnResponse(replies=result.replies, step=result.step)


@router.post("/events/callback", response_model=TurnResponse)
async def post_callback(event: CallbackEventRequest, assistant: AssistantDep) -> TurnResponse:
    """Process a button press and return the replies for its sender."""
    result = await assistant.process_callback(event.user_id, event.payload)
    return TurnResponse(replies=result.replies, step=result.step)


@router.get("/sessions/{user_id}", response_model=SessionResponse)
async def get_session(user_id: int, assistant: AssistantDep) -> SessionResponse:
    """Get the current dialogue session of a user."""
    session = assistant.get_session(user_id)
    if session is None:
        return SessionResponse(user_id=user_id, active=False)
    return SessionResponse(
        user_id=user_id,
        active=True,
        step=session.step,
        data=session.data.model_dump(mode="json"),
        updated_at=session.updated_at,
    )


@router.delete("/sessions/{user_id}", response_model=ResetResponse)
async def reset_session(user_id: int, assistant: AssistantDep) -> ResetResponse:
    """Drop the dialogue session of a user."""
    if assistant.reset_session(user_id):
        return ResetResponse(success=True, message="Session cleared")
    return ResetResponse(success=False, message="No active session")


@router.get("/outbox/{user_id}", response_model=OutboxResponse)
async def drain_outbox(user_id: int, assistant: AssistantDep) -> OutboxResponse:
    """Return and forget the messages pushed to a user."""
    if not isinstance(assistant.transport, BufferedTransport):
        raise HTTPException(status_code=501, detail="Transport does not buffer messages")
    messages = assistant.transport.drain(user_id)
    return OutboxResponse(
        user_id=user_id,
        messages=[
            OutboxMessage(text=message.text, has_image=message.image is not None)
            for message in messages
        ],
    )


def create_app(assistant: Assistant | None = None) -> FastAPI:
    """Factory function.

    Args:
        assistant: Assistant to serve. When omitted one is built on startup
            from SPOTTER_CONFIG_PATH (or ./spotter.yaml, or defaults).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan - start the assistant, stop it on shutdown."""
        running = assistant or _load_assistant()
        async with running:
            app.state.assistant = running
            logger.info("Assistant initialized and ready.")
            yield
            logger.info("Assistant cleanup...")
            app.state.assistant = None

    app = FastAPI(
        title="Spotter",
        description="Chat-based personal-trainer assistant",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_exception_handler(Exception, global_exception_handler)
    app.include_router(router)
    return app


app = create_app()
