"""Error variants raised by the user repository and controller.

Each error carries a ``kind`` so the HTTP layer can choose a status code
without inspecting message text. Messages are shown to API callers verbatim.
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DUPLICATE_EMAIL = "duplicate_email"
    STORE = "store"


class UserServiceError(Exception):
    """Base class for all user service failures."""

    kind: ErrorKind = ErrorKind.STORE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ValidationError(UserServiceError):
    """Client input is missing or malformed."""

    kind = ErrorKind.VALIDATION


class NotFound(UserServiceError):
    """No user row exists for the requested id."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class DuplicateEmail(UserServiceError):
    """Another user already owns the email address."""

    kind = ErrorKind.DUPLICATE_EMAIL

    def __init__(self, message: str = "User with this email already exists"):
        super().__init__(message)


class StoreError(UserServiceError):
    """The database was unreachable or returned an inconsistent result."""

    kind = ErrorKind.STORE
