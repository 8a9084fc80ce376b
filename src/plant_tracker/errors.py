"""Domain errors and the single kind → HTTP status mapping.

Services raise these; they never build HTTP responses themselves. Each
error carries an ErrorKind, and STATUS_BY_KIND is the only place that
decides which status code a kind becomes. The exception handlers in
main.py render them.
"""

import enum
import uuid


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    INTERNAL = "internal"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}

# The only body a 500 ever carries.
INTERNAL_ERROR_BODY = {"detail": "Internal server error"}


class PlantTrackerError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


# ─── Auth ───────────────────────────────────────────────


class AuthError(PlantTrackerError):
    """Errors rendered in the AuthResponse shape."""


class EmailExists(AuthError):
    kind = ErrorKind.CONFLICT

    def __init__(self, email: str):
        super().__init__("Email already exists")
        self.email = email


class UsernameExists(AuthError):
    kind = ErrorKind.CONFLICT

    def __init__(self, username: str):
        super().__init__("Username already exists")
        self.username = username


class InvalidCredentials(AuthError):
    kind = ErrorKind.UNAUTHORIZED

    def __init__(self):
        super().__init__("Invalid credentials")


class TokenInvalid(PlantTrackerError):
    """Any token that fails validation. The cause is never exposed."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class UserNotFound(PlantTrackerError):
    """A validated token named a user that no longer exists."""

    kind = ErrorKind.INTERNAL

    def __init__(self, email: str):
        super().__init__(f"User not found: {email}")
        self.email = email


# ─── Plants ─────────────────────────────────────────────


class PlantAlreadyExists(PlantTrackerError):
    kind = ErrorKind.CONFLICT

    def __init__(self, name: str):
        super().__init__(f"Plant '{name}' already exists")
        self.name = name


class PlantNotFound(PlantTrackerError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, plant_id: uuid.UUID):
        super().__init__(f"Plant with id '{plant_id}' does not exist")
        self.plant_id = plant_id


class InvalidSort(PlantTrackerError):
    kind = ErrorKind.VALIDATION

    def __init__(self, sort: str):
        super().__init__(f"Invalid sort parameter: '{sort}'")
        self.sort = sort
