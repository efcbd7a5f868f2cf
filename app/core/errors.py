"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    item_id: int
    requests_number: int
    retry_after: int
    limit: int
    remaining: int
    reset_at: int
    errors: list[dict[str, Any]]
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    http_status: ClassVar[int] = 400

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input validation fails (e.g., nothing to update)."""


class AuthenticationAppError(AppError):
    """Raised when a bearer token is missing, malformed, or unknown."""

    http_status: ClassVar[int] = 401


class AlreadyRegisteredAppError(AppError):
    """Raised when an IP re-registers while its current token still has credits."""

    http_status: ClassVar[int] = 403


class NotFoundAppError(AppError):
    """Raised when a requested resource does not exist."""

    http_status: ClassVar[int] = 404


class TooManyAttemptsAppError(AppError):
    """Raised when the per-IP registration throttle is exceeded."""

    http_status: ClassVar[int] = 429


class QuotaExhaustedAppError(AppError):
    """Raised when a user has no request credits left."""

    http_status: ClassVar[int] = 429
