from .schemas import (
    ErrorResponse,
    MessageResponse,
    UserCreate,
    UserInput,
    UserOutput,
    UserUpdate,
)
from .user import User

__all__ = [
    "ErrorResponse",
    "MessageResponse",
    "User",
    "UserCreate",
    "UserInput",
    "UserOutput",
    "UserUpdate",
]
