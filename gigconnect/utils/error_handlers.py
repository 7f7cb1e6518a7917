"""
Centralized error types and user-friendly error messages.

Every error raised by handlers derives from AppError and carries the HTTP status
it maps to; main.py translates them into the standard JSON envelope and the
realtime loop translates them into `error` events.
"""
import logging

from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed request fields."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class AuthError(AppError):
    """Missing, invalid or expired credentials."""
    def __init__(self, message: str = "Authentication required", status_code: int = 401, details: dict | None = None):
        super().__init__(message, status_code=status_code, details=details)


class MissingToken(AuthError):
    def __init__(self, message: str = "Access token required"):
        super().__init__(message, status_code=401)


class InvalidToken(AuthError):
    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, status_code=403)


class ForbiddenError(AppError):
    """Authenticated, but the role does not permit the action."""
    def __init__(self, message: str = "Access forbidden", details: dict | None = None):
        super().__init__(message, status_code=403, details=details)


class ConflictError(AppError):
    """Duplicate registration or duplicate application."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class NotFoundError(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(message, status_code=404, details=details)


class StoreError(AppError):
    """Underlying persistence failure. Never exposes driver details to clients."""
    def __init__(self, message: str = "Database operation failed", details: dict | None = None):
        super().__init__(message, status_code=500, details=details)


# User-friendly error messages
ERROR_MESSAGES = {
    # Authentication
    "invalid_credentials": "Invalid credentials",
    "email_exists": "User already exists",
    "weak_password": "Password must be at least 6 characters long.",
    "token_required": "Access token required",
    "invalid_token": "Invalid token",

    # Gigs
    "gig_not_found": "Gig not found or no longer open.",
    "already_applied": "Already applied to this gig",
    "clients_only": "Only clients can post gigs.",
    "freelancers_only": "Only freelancers can apply to gigs.",

    # Messaging
    "message_failed": "Failed to send message. Please try again.",
    "invalid_message": "Message must include recipientId and non-empty content.",
    "unknown_event": "Unknown event.",

    # General
    "unauthorized": "Please login to access this feature.",
    "forbidden": "You don't have permission to access this resource.",
    "not_found": "The requested resource was not found.",
    "server_error": "Something went wrong on our end. Please try again later.",
    "database_error": "Database connection issue. Please try again later.",
    "validation_error": "Please check your input and try again.",
}


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


def handle_database_error(error: Exception, operation: str = "") -> AppError:
    """Map a database exception onto the error taxonomy."""
    logger.error(f"Database error during {operation}: {error}")

    if isinstance(error, IntegrityError):
        error_str = str(error).lower()
        if "unique" in error_str or "duplicate" in error_str:
            return ConflictError("This record already exists. Please check your input.")
        if "foreign key" in error_str:
            return ValidationError("Invalid reference. The related record may have been deleted.")

    return StoreError(get_error_message("database_error"))


def create_error_response(
    status_code: int,
    message: str,
    details: dict | None = None
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "success": False,
        "error": message,
        "status_code": status_code,
    }

    if details:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content
    )
