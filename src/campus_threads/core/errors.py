"""Domain error taxonomy shared by the graph and content engines.

Every error carries the HTTP status the API layer maps it to, so services can
raise them without knowing about FastAPI.
"""

from __future__ import annotations

from fastapi import status


class CampusThreadsError(RuntimeError):
    """Base class for errors raised by the core services."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationRequired(CampusThreadsError):
    """No resolvable actor for an operation that needs one."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class AuthorizationDenied(CampusThreadsError):
    """The actor is authenticated but not allowed to perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class NotFound(CampusThreadsError):
    """A referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidState(CampusThreadsError):
    """The operation is not valid for the entity's current lifecycle state."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Invalid state for this operation"


class ValidationError(CampusThreadsError):
    """Malformed input that passed schema validation but breaks a domain rule."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Invalid input"


__all__ = [
    "CampusThreadsError",
    "AuthenticationRequired",
    "AuthorizationDenied",
    "NotFound",
    "InvalidState",
    "ValidationError",
]
