import pytest

from gigconnect.utils.error_handlers import (
    ConflictError,
    StoreError,
    ValidationError,
    get_error_message,
    handle_database_error,
)
from gigconnect.utils.validation import (
    validate_budget,
    validate_email,
    validate_password,
    validate_role,
    validate_string_field,
)
from sqlalchemy.exc import IntegrityError, OperationalError


class TestEmailValidation:
    def test_valid_email(self):
        assert validate_email("test@example.com") == "test@example.com"
        assert validate_email("  USER@EXAMPLE.COM  ") == "user@example.com"

    @pytest.mark.parametrize("email", ["invalid", "testexample.com", "a@b", ""])
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError) as exc:
            validate_email(email)
        assert exc.value.status_code == 400


class TestPasswordValidation:
    def test_valid(self):
        validate_password("123456")

    def test_too_short(self):
        with pytest.raises(ValidationError) as exc:
            validate_password("12345")
        assert "at least 6" in exc.value.message

    def test_too_long(self):
        with pytest.raises(ValidationError):
            validate_password("x" * 73)


class TestRoleValidation:
    @pytest.mark.parametrize("role", ["client", "Freelancer", " both "])
    def test_valid_roles(self, role):
        assert validate_role(role) == role.strip().lower()

    def test_invalid_role(self):
        with pytest.raises(ValidationError) as exc:
            validate_role("admin")
        assert "Invalid role" in exc.value.message


class TestStringField:
    def test_strips(self):
        assert validate_string_field("  Logo  ", "title") == "Logo"

    def test_required(self):
        with pytest.raises(ValidationError):
            validate_string_field(None, "title")
        with pytest.raises(ValidationError):
            validate_string_field("   ", "title")

    def test_optional(self):
        assert validate_string_field(None, "bio", required=False) is None

    def test_max_length(self):
        with pytest.raises(ValidationError):
            validate_string_field("x" * 11, "title", max_length=10)


def test_budget_rules():
    validate_budget(50, 200)
    validate_budget(None, None)
    with pytest.raises(ValidationError):
        validate_budget(200, 50)
    with pytest.raises(ValidationError):
        validate_budget(-1, None)


class TestDatabaseErrorMapping:
    def test_unique_violation_is_conflict(self):
        err = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))
        mapped = handle_database_error(err, "creating user")
        assert isinstance(mapped, ConflictError)
        assert mapped.status_code == 400

    def test_other_failures_are_store_errors_without_details(self):
        err = OperationalError("SELECT", {}, Exception("connection refused to 10.0.0.5"))
        mapped = handle_database_error(err, "login")
        assert isinstance(mapped, StoreError)
        assert mapped.status_code == 500
        assert "10.0.0.5" not in mapped.message


def test_get_error_message_falls_back():
    assert get_error_message("already_applied") == "Already applied to this gig"
    assert get_error_message("no_such_key") == get_error_message("server_error")
