"""
Service error taxonomy.
Each error knows the HTTP status and error code it maps to, so routes can
let them propagate to the application exception handler.
"""
from typing import Any, Dict, List, Optional

from fastapi import status


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "SERVICE_ERROR"
    default_message: str = "Request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"detail": self.message, "error_code": self.error_code}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(ServiceError):
    """Malformed or disallowed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"
    default_message = "Validation error"


class InvalidCredentials(ServiceError):
    """Login failed. Never says whether the email or the password was wrong."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_CREDENTIALS"
    default_message = "Unable to log in"


class Unauthenticated(ServiceError):
    """Missing, invalid or revoked bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHENTICATED"
    default_message = "Please authenticate"


class NotFound(ServiceError):
    """Resource absent, or not owned by the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    default_message = "Not found"


class InternalFailure(ServiceError):
    """Unexpected store or runtime fault."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "INTERNAL_FAILURE"
    default_message = "Internal server error"
