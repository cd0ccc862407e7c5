"""
Typed domain errors.

Services raise these instead of HTTP exceptions so the same core can sit
behind the API, a CLI or a test harness. The API layer maps each class to
its HTTP status through a single exception handler (see main.py).
"""

from fastapi import status


class TablebookError(Exception):
    """Base class for all domain failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(TablebookError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"

    def __init__(self, resource: str, identifier):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")


class ValidationError(TablebookError):
    """Missing/malformed input or a business rule violated before mutation."""

    status_code = 422
    code = "validation_error"


class CapacityExceededError(ValidationError):
    code = "capacity_exceeded"

    def __init__(self, requested: int, remaining: int):
        self.requested = requested
        self.remaining = remaining
        if remaining == 0:
            message = "Fully booked for this date"
        else:
            message = f"Only {remaining} seats left. Requested: {requested}"
        super().__init__(message)


class InvalidTransitionError(ValidationError):
    code = "invalid_transition"

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move reservation from {current} to {target}")


class ConflictError(TablebookError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class AuthenticationError(TablebookError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_failed"


class PermissionDeniedError(TablebookError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "permission_denied"


class StorageUnavailableError(TablebookError):
    """Backing store timed out or is unreachable. Safe to retry."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "storage_unavailable"
