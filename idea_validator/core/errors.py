"""Application-level exception types.

Domain errors shared by services and adapters. Each subclass maps to one
HTTP status in ``exception_handlers``; services raise them, routes let them
propagate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    limit: int
    count: int
    collection: str
    document_id: str
    provider: str
    model: str
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

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input validation fails."""


class ConfigurationAppError(AppError):
    """Raised when required configuration (credentials, backends) is missing."""


class AuthenticationAppError(AppError):
    """Raised when the caller cannot be authenticated."""


class PermissionAppError(AppError):
    """Raised when the caller does not own the requested record."""


class NotFoundAppError(AppError):
    """Raised when a requested document does not exist."""


class QuotaExceededAppError(AppError):
    """Raised when a user has used up their question credits."""


class LLMAppError(AppError):
    """Raised when the generative-language provider fails or answers badly."""


class StoreAppError(AppError):
    """Raised when the remote document store is unavailable."""
