from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

if TYPE_CHECKING:
    from app.services.toil_validation import BalanceViolation


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int
    violations: list[dict[str, Any]] | None = None


class AppError(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidTransitionError(AppError):
    """A lifecycle action was attempted from a state that does not allow it.

    Signals a caller contract bug (e.g. submitting an already pending week),
    not a problem with the user's data.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class SubmissionValidationError(AppError):
    """Save or submit refused because the week breaks a balance rule.

    User-correctable: the violations say which day needs fixing.
    """

    def __init__(self, message: str, violations: list[BalanceViolation]) -> None:
        self.violations = violations
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class TransientPersistenceError(AppError):
    """A database write failed for a reason worth retrying."""

    def __init__(self, message: str = "Storage temporarily unavailable, please retry") -> None:
        super().__init__(message, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    violations = None
    if isinstance(exc, SubmissionValidationError):
        violations = [v.to_dict() for v in exc.violations]
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
            violations=violations,
        ).model_dump(exclude_none=True),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(exclude_none=True),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
