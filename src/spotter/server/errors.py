"""Server error handling - sanitizes errors for client responses.

Prevents exposure of internal details such as stored data, stack traces and
configuration to HTTP clients.
"""

import logging
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse

from spotter.core.errors import PersistenceError, TransportError

logger = logging.getLogger(__name__)


# Error messages safe to expose to clients
SAFE_ERROR_MESSAGES = {
    "ConfigError": "Configuration error. Please contact support.",
    "FlowError": "Dialogue state error. Please start again from the menu.",
    "PersistenceError": "Storage error. Please try again.",
    "TransportError": "Message delivery failed.",
}

DEFAULT_ERROR_MESSAGE = "An internal error occurred. Please try again later."


def create_error_reference() -> str:
    """Generate unique error reference for client/server correlation."""
    return f"ERR-{uuid.uuid4().hex[:8].upper()}"


def get_safe_error_message(exception: Exception) -> str:
    """Get client-safe error message for exception type."""
    return SAFE_ERROR_MESSAGES.get(type(exception).__name__, DEFAULT_ERROR_MESSAGE)


def get_http_status_for_exception(exception: Exception) -> int:
    """Map exception types to appropriate HTTP status codes."""
    if isinstance(exception, (PersistenceError, TransportError)):
        return 503
    # ConfigError, FlowError and unknown errors are server faults
    return 500


def log_error_with_context(
    error_ref: str,
    exception: Exception,
    user_id: int | None = None,
    endpoint: str | None = None,
) -> None:
    """Log full error details server-side for debugging."""
    logger.error(
        f"[{error_ref}] Error in {endpoint or 'unknown'} "
        f"for user {user_id or 'unknown'}: {type(exception).__name__}: {exception}",
        exc_info=exception,
        extra={
            "error_reference": error_ref,
            "user_id": user_id,
            "endpoint": endpoint,
            "exception_type": type(exception).__name__,
        },
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for uncaught exceptions."""
    error_ref = create_error_reference()
    user_id = request.path_params.get("user_id")
    log_error_with_context(error_ref, exc, user_id, request.url.path)

    return JSONResponse(
        status_code=get_http_status_for_exception(exc),
        content={
            "error": get_safe_error_message(exc),
            "reference": error_ref,
            "message": "If this problem persists, contact support with the reference code.",
        },
    )
