"""Domain exceptions and error classification utilities."""

from enum import Enum

from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from src.core.config import Constants
from src.core.db_client import DatabaseError, RecordNotFoundError


class HearthError(Exception):
    """Base class for domain errors raised by the service layer."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFoundError(HearthError, LookupError):
    """Referenced record does not exist in the given household."""


class ForbiddenError(HearthError, PermissionError):
    """Acting user is not allowed to perform the action."""


class InvalidStateTransitionError(HearthError, ValueError):
    """Requested status change is not allowed from the current status."""


class ErrorCategory(Enum):
    """Categories of errors surfaced to callers."""

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    INVALID_STATE_TRANSITION = "invalid_state_transition"
    VALIDATION_ERROR = "validation_error"
    PERSISTENCE_FAILURE = "persistence_failure"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_NOT_FOUND = "ERR_NOT_FOUND"
    ERR_FORBIDDEN = "ERR_FORBIDDEN"
    ERR_INVALID_STATE_TRANSITION = "ERR_INVALID_STATE_TRANSITION"
    ERR_VALIDATION = "ERR_VALIDATION"
    ERR_PERSISTENCE_FAILURE = "ERR_PERSISTENCE_FAILURE"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    category: ErrorCategory
    message: str
    suggestion: str
    severity: ErrorSeverity
    status_code: int


def classify_error_with_response(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised during execution

    Returns:
        ErrorResponse with code, message, suggestion, severity and HTTP status
    """
    if isinstance(exception, NotFoundError | RecordNotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_NOT_FOUND,
            category=ErrorCategory.NOT_FOUND,
            message=str(exception) if isinstance(exception, NotFoundError) else "Record not found.",
            suggestion="Check the identifier and the household you are working in.",
            severity=ErrorSeverity.LOW,
            status_code=Constants.HTTP_NOT_FOUND,
        )

    if isinstance(exception, PermissionError):
        return ErrorResponse(
            code=ErrorCode.ERR_FORBIDDEN,
            category=ErrorCategory.PERMISSION_DENIED,
            message=str(exception) or "You don't have permission for this action.",
            suggestion="Contact your household assistant if you think this is an error.",
            severity=ErrorSeverity.MEDIUM,
            status_code=Constants.HTTP_FORBIDDEN,
        )

    if isinstance(exception, InvalidStateTransitionError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_STATE_TRANSITION,
            category=ErrorCategory.INVALID_STATE_TRANSITION,
            message=str(exception),
            suggestion="Refresh the task and check its current status.",
            severity=ErrorSeverity.LOW,
            status_code=Constants.HTTP_BAD_REQUEST,
        )

    if isinstance(exception, ValidationError | RequestValidationError):
        return ErrorResponse(
            code=ErrorCode.ERR_VALIDATION,
            category=ErrorCategory.VALIDATION_ERROR,
            message="The request contains invalid fields.",
            suggestion="; ".join(err["msg"] for err in exception.errors()) or "Check the request body.",
            severity=ErrorSeverity.LOW,
            status_code=Constants.HTTP_UNPROCESSABLE,
        )

    if isinstance(exception, DatabaseError | TimeoutError):
        return ErrorResponse(
            code=ErrorCode.ERR_PERSISTENCE_FAILURE,
            category=ErrorCategory.PERSISTENCE_FAILURE,
            message="The data store is unavailable.",
            suggestion="Please try again in a moment.",
            severity=ErrorSeverity.HIGH,
            status_code=Constants.HTTP_SERVER_ERROR,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        category=ErrorCategory.UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
        status_code=Constants.HTTP_SERVER_ERROR,
    )
