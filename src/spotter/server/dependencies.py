"""FastAPI dependencies for server endpoints."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from spotter.runtime.assistant import Assistant


def get_assistant(request: Request) -> Assistant:
    """Dependency to get the running Assistant.

    Raises:
        HTTPException: 503 if the assistant is not initialized
    """
    assistant = getattr(request.app.state, "assistant", None)

    if assistant is None:
        raise HTTPException(
            status_code=503,
            detail={
                "error": "Service temporarily unavailable",
                "message": "Server is starting up. Please try again in a few seconds.",
            },
        )
    return assistant


# Type alias for cleaner endpoint signatures
AssistantDep = Annotated[Assistant, Depends(get_assistant)]
