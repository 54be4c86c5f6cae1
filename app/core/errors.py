# app/core/errors.py
from __future__ import annotations

from typing import Any, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    """
    Base for every error the API surfaces.
    The body is always {"error": <generic message>, "reason": <short code|None>};
    internal exception text goes to the log, never to the client.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Something went wrong"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        reason: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.reason = reason
        detail: dict[str, Any] = {"error": message or self.message, "reason": reason}
        super().__init__(status_code=type(self).status_code, detail=detail, headers=headers)


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "You must be logged in."

    def __init__(self, message: Optional[str] = None, *, reason: Optional[str] = None) -> None:
        super().__init__(message, reason=reason, headers={"WWW-Authenticate": "Bearer"})


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Not allowed"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class WorkflowBusy(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Another action is still running"


class WorkflowClosed(AppError):
    status_code = status.HTTP_410_GONE
    message = "Recipe creation was abandoned"


class LimitReached(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = (
        "You have reached the maximum number of interactions with our AI services. "
        "Please try again later."
    )


class PersistenceFailure(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Failed to save"


class UpstreamFailure(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    message = "The AI service failed"
