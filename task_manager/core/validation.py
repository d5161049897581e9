"""
Field-level validation rules for users and tasks.

The functions here are pure: they take plain values and return a list of
violations instead of raising, so callers can report every problem at once.
Services call them explicitly before every persist.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from email_validator import EmailNotValidError, validate_email

from .exceptions import ValidationError

# Largest value the age column holds on every supported database
MAX_AGE = 2**31 - 1


@dataclass(frozen=True)
class Violation:
    """A single rule a field failed."""

    field: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def normalize_email(email: Optional[str]) -> Optional[str]:
    if email is None:
        return None
    return email.strip().lower()


def normalize_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip()


def validate_email_syntax(email: Optional[str]) -> List[Violation]:
    if not email:
        return [Violation("email", "Email is required.")]
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return [Violation("email", "Email is invalid.")]
    return []


def validate_password(password: Optional[str], min_length: int = 6) -> List[Violation]:
    if password is None:
        return [Violation("password", "Password is required.")]

    violations = []
    if len(password) < min_length:
        violations.append(
            Violation("password", f"Password must be at least {min_length} characters long.")
        )
    if "password" in password.lower():
        violations.append(Violation("password", 'Password must not contain the word "password".'))
    return violations


def validate_user(
    name: Optional[str],
    email: Optional[str],
    password: Optional[str],
    age: Optional[int],
    password_min_length: int = 6,
    check_password: bool = True,
) -> List[Violation]:
    """
    Validate a user record.

    Values are expected to be normalized already (see normalize_text and
    normalize_email). `check_password` is False when the stored password is
    an existing hash that is not being changed.
    """
    violations: List[Violation] = []

    if not name:
        violations.append(Violation("name", "Name is required."))

    violations.extend(validate_email_syntax(email))

    if check_password:
        violations.extend(validate_password(password, password_min_length))

    if age is None or isinstance(age, bool) or not isinstance(age, int):
        violations.append(Violation("age", "Age must be an integer."))
    elif age < 0:
        violations.append(Violation("age", "Age must be a positive number."))
    elif age > MAX_AGE:
        violations.append(Violation("age", "Age is too large."))

    return violations


def validate_task(description: Optional[str], completed: Any) -> List[Violation]:
    """Validate a task record (description already trimmed)."""
    violations: List[Violation] = []

    if not description:
        violations.append(Violation("description", "Description is required."))

    if not isinstance(completed, bool):
        violations.append(Violation("completed", "Completed must be a boolean."))

    return violations


def ensure_valid(violations: List[Violation], message: str = "Validation error") -> None:
    """Raise ValidationError carrying every violation, if there are any."""
    if violations:
        raise ValidationError(message, errors=[v.to_dict() for v in violations])
