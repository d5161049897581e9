"""
Unit tests for the pure validation rules.
"""
import pytest

from task_manager.core.exceptions import ValidationError
from task_manager.core.validation import (
    MAX_AGE,
    Violation,
    ensure_valid,
    normalize_email,
    normalize_text,
    validate_password,
    validate_task,
    validate_user
)

pytestmark = pytest.mark.unit


def fields(violations):
    return [v.field for v in violations]


class TestNormalization:

    def test_normalize_email(self):
        assert normalize_email("  Nada@Example.COM ") == "nada@example.com"
        assert normalize_email(None) is None

    def test_normalize_text(self):
        assert normalize_text("  Read my book \n") == "Read my book"
        assert normalize_text(None) is None


class TestValidateUser:

    def test_valid_user(self):
        assert validate_user("Nada", "nadarach@example.com", "keY@W087!", 0) == []

    def test_missing_name(self):
        assert fields(validate_user("", "nadarach@example.com", "keY@W087!", 0)) == ["name"]

    @pytest.mark.parametrize("email", [None, "", "example.com", "nada@", "@example.com"])
    def test_invalid_email(self, email):
        assert fields(validate_user("Nada", email, "keY@W087!", 0)) == ["email"]

    @pytest.mark.parametrize("age", [-1, None, True, "3", 2.5, MAX_AGE + 1, 10**20])
    def test_invalid_age(self, age):
        assert fields(validate_user("Nada", "nadarach@example.com", "keY@W087!", age)) == ["age"]

    def test_largest_age_is_accepted(self):
        assert validate_user("Nada", "nadarach@example.com", "keY@W087!", MAX_AGE) == []

    def test_password_skipped_when_unchanged(self):
        assert validate_user("Nada", "nadarach@example.com", None, 3, check_password=False) == []

    def test_collects_every_violation(self):
        violations = validate_user("", "bad", "pw", -1)

        assert fields(violations) == ["name", "email", "password", "age"]


class TestValidatePassword:

    def test_exactly_minimum_length(self):
        assert validate_password("abc123") == []

    def test_too_short(self):
        assert fields(validate_password("abc12")) == ["password"]

    @pytest.mark.parametrize("password", ["keY@password@W087!", "@passWORD@!", "PASSWORD123"])
    def test_contains_password(self, password):
        assert fields(validate_password(password)) == ["password"]

    def test_short_and_contains_password_reports_both(self):
        assert len(validate_password("password", min_length=12)) == 2

    def test_whitespace_is_kept(self):
        # Passwords are not trimmed, so the spaces count toward the length
        assert validate_password("  ab  ") == []


class TestValidateTask:

    def test_valid_task(self):
        assert validate_task("Read my book", False) == []

    @pytest.mark.parametrize("description", [None, ""])
    def test_missing_description(self, description):
        assert fields(validate_task(description, False)) == ["description"]

    @pytest.mark.parametrize("completed", [None, "true", 1, 0])
    def test_completed_must_be_boolean(self, completed):
        assert fields(validate_task("Read my book", completed)) == ["completed"]


class TestEnsureValid:

    def test_no_violations(self):
        ensure_valid([])

    def test_raises_with_every_violation(self):
        with pytest.raises(ValidationError) as exc_info:
            ensure_valid([Violation("name", "Name is required."), Violation("age", "Bad age.")])

        assert exc_info.value.status_code == 400
        assert exc_info.value.errors == [
            {"field": "name", "message": "Name is required."},
            {"field": "age", "message": "Bad age."}
        ]
