"""Shared exceptions for the assessment service.

Every domain error carries a ``kind`` discriminant. Retry decisions, fallback
decisions and HTTP status mapping all switch on ``kind`` rather than on the
concrete exception class.
"""

from datetime import datetime
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of error kinds used across the pipeline."""

    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RATE_LIMIT = "rate_limit"
    EXTERNAL_SERVICE = "external_service"
    TIMEOUT = "timeout"
    PARSE = "parse"
    CIRCUIT_OPEN = "circuit_open"
    COMPLETION_PRECONDITION = "completion_precondition"
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    CONFIGURATION = "configuration"


# Kinds where another attempt cannot help. A timed-out request has already
# spent its time budget.
NON_RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset({
    ErrorKind.VALIDATION,
    ErrorKind.AUTHENTICATION,
    ErrorKind.AUTHORIZATION,
    ErrorKind.CIRCUIT_OPEN,
    ErrorKind.COMPLETION_PRECONDITION,
    ErrorKind.TIMEOUT,
})


class AssessmentServiceError(Exception):
    """Base exception for all application errors.

    All domain-specific exceptions should inherit from this class
    to enable consistent error handling at the API layer.
    """

    kind: ErrorKind = ErrorKind.INVALID_STATE

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def is_retryable(self) -> bool:
        return self.kind not in NON_RETRYABLE_KINDS

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
        }


def error_kind_of(error: BaseException) -> ErrorKind | None:
    """Return the kind of a domain error, or None for foreign exceptions."""
    if isinstance(error, AssessmentServiceError):
        return error.kind
    return None


# ===================
# Caller Errors
# ===================

class ValidationError(AssessmentServiceError):
    """Raised when input validation fails."""

    kind = ErrorKind.VALIDATION

    def __init__(self, field: str, message: str) -> None:
        super().__init__(
            f"Validation error for '{field}': {message}",
            {"field": field}
        )


class AuthenticationError(AssessmentServiceError):
    """Raised when the upstream service rejects our credentials."""

    kind = ErrorKind.AUTHENTICATION


class AuthorizationError(AssessmentServiceError):
    """Raised when the credentials are valid but lack permission."""

    kind = ErrorKind.AUTHORIZATION


class CompletionPreconditionError(AssessmentServiceError):
    """Raised when a session is finalized before all responses are in."""

    kind = ErrorKind.COMPLETION_PRECONDITION

    def __init__(self, session_id: str, response_count: int, required: int) -> None:
        super().__init__(
            f"Assessment not complete - need {required} responses, got {response_count}",
            {
                "session_id": session_id,
                "response_count": response_count,
                "required": required,
            }
        )


# ===================
# Resource Errors
# ===================

class ResourceNotFoundError(AssessmentServiceError):
    """Raised when a requested resource is not found."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            {"resource_type": resource_type, "resource_id": str(resource_id)}
        )


class SessionNotFoundError(ResourceNotFoundError):
    """Raised when a session is not found."""

    def __init__(self, session_id: str) -> None:
        super().__init__("Session", session_id)


# ===================
# State Errors
# ===================

class InvalidStateError(AssessmentServiceError):
    """Raised when an operation is invalid for the current state."""

    kind = ErrorKind.INVALID_STATE


class SessionClosedError(InvalidStateError):
    """Raised when a completed session receives another response."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            "Session is already completed",
            {"session_id": session_id}
        )


# ===================
# Integration Errors
# ===================

class RateLimitExceededError(AssessmentServiceError):
    """Raised when a caller key has used up its request window."""

    kind = ErrorKind.RATE_LIMIT

    def __init__(self, key: str, retry_after: float) -> None:
        super().__init__(
            f"Rate limit exceeded for '{key}'",
            {"key": key, "retry_after": retry_after}
        )
        self.retry_after = retry_after


class ExternalServiceError(AssessmentServiceError):
    """Raised when an external service call fails."""

    kind = ErrorKind.EXTERNAL_SERVICE

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            f"External service error ({service}): {message}",
            {"service": service, "status_code": status_code}
        )
        self.status_code = status_code


class LLMServiceError(ExternalServiceError):
    """Raised when the LLM service fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__("LLM", message, status_code)


class LLMTimeoutError(LLMServiceError):
    """Raised when an LLM request is cancelled for exceeding its timeout."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"request timed out after {timeout_seconds}s")
        self.details["timeout_seconds"] = timeout_seconds


class ResponseParseError(AssessmentServiceError):
    """Raised when an AI payload cannot be turned into a domain value."""

    kind = ErrorKind.PARSE

    def __init__(self, message: str) -> None:
        super().__init__(f"Could not parse AI response: {message}")


class CircuitOpenError(AssessmentServiceError):
    """Raised by a circuit breaker that is refusing calls."""

    kind = ErrorKind.CIRCUIT_OPEN

    def __init__(self, name: str, last_failure_time: datetime | None = None) -> None:
        super().__init__(
            f"Circuit '{name}' is open",
            {
                "circuit": name,
                "last_failure_time": (
                    last_failure_time.isoformat() if last_failure_time else None
                ),
            }
        )
        self.name = name
        self.last_failure_time = last_failure_time


# ===================
# Configuration Errors
# ===================

class ConfigurationError(AssessmentServiceError):
    """Raised when there's a configuration problem."""

    kind = ErrorKind.CONFIGURATION
