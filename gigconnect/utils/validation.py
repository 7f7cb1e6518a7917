"""
Validation utilities for request fields.

Schemas (pydantic) enforce the shape of each request body; these helpers apply
the business rules on top and raise ValidationError with a readable message.
"""
import re
from typing import Any

from ..models.user import USER_ROLES
from .error_handlers import ValidationError

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def validate_email(email: str) -> str:
    """Validate email format."""
    if not email or not isinstance(email, str):
        raise ValidationError("Email is required")

    email = email.strip().lower()
    if len(email) > 255:
        raise ValidationError("Email too long (max 255 characters)")

    if not re.match(EMAIL_PATTERN, email):
        raise ValidationError("Invalid email format")

    return email


def validate_password(password: str) -> None:
    """Validate password strength."""
    if not password or not isinstance(password, str):
        raise ValidationError("Password is required")

    if len(password) < 6:
        raise ValidationError("Password must be at least 6 characters")

    if len(password) > 72:
        raise ValidationError("Password too long (max 72 characters)")


def validate_role(role: str) -> str:
    """Validate user role."""
    if not role or not isinstance(role, str):
        raise ValidationError("Role is required")

    role = role.strip().lower()
    if role not in USER_ROLES:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(USER_ROLES)}")

    return role


def validate_string_field(
    value: Any,
    field_name: str,
    max_length: int = 1000,
    required: bool = True,
) -> str | None:
    """Presence and length check for a text field."""
    if value is None:
        if required:
            raise ValidationError(f"{field_name} is required")
        return None

    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")

    value = value.strip()

    if required and not value:
        raise ValidationError(f"{field_name} cannot be empty")

    if len(value) > max_length:
        raise ValidationError(f"{field_name} must not exceed {max_length} characters")

    return value or None


def validate_budget(budget_min: float | None, budget_max: float | None) -> None:
    for name, value in (("budgetMin", budget_min), ("budgetMax", budget_max)):
        if value is not None and value < 0:
            raise ValidationError(f"{name} must not be negative")
    if budget_min is not None and budget_max is not None and budget_min > budget_max:
        raise ValidationError("budgetMin must not exceed budgetMax")
