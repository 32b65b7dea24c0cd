"""Business rules for user operations, sitting between routes and the repository."""

import logging
import re
from typing import List, Mapping, Union

from .errors import NotFound, ValidationError
from .models.schemas import MessageResponse, UserCreate, UserInput, UserOutput
from .repository import UserRepository

logger = logging.getLogger(__name__)

# local@domain.tld with no whitespace or extra "@"; deliberately loose
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


def validate_user_data(data: UserCreate) -> UserInput:
    """Check a create request and return it as a complete ``UserInput``.

    Rules run in order and the first failure is raised as a ValidationError.
    """
    if not data.username or len(data.username.strip()) < MIN_USERNAME_LENGTH:
        raise ValidationError("Username must be at least 3 characters long")

    if not data.email or not EMAIL_PATTERN.fullmatch(data.email):
        raise ValidationError("Valid email address is required")

    if not data.password or len(data.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password must be at least 6 characters long")

    return UserInput(username=data.username, email=data.email, password=data.password)


class UserController:
    """Validate input and translate repository results into domain errors."""

    def __init__(self, repository: UserRepository):
        self._repository = repository

    @property
    def repository(self) -> UserRepository:
        return self._repository

    def get_all_users(self) -> List[UserOutput]:
        return self._repository.find_all()

    def get_user_by_id(self, user_id: int) -> UserOutput:
        user = self._repository.find_by_id(user_id)
        if user is None:
            raise NotFound()
        return user

    def create_user(self, data: Union[UserCreate, Mapping]) -> UserOutput:
        if not isinstance(data, UserCreate):
            data = UserCreate.model_validate(data)
        try:
            user_input = validate_user_data(data)
        except ValidationError as exc:
            logger.info("rejected user creation: %s", exc.message)
            raise
        return self._repository.create(user_input)

    def update_user(self, user_id: int, changes: Mapping) -> UserOutput:
        if not changes:
            raise ValidationError("No data provided for update")

        user = self._repository.update(user_id, dict(changes))
        if user is None:
            raise NotFound()
        return user

    def delete_user(self, user_id: int) -> MessageResponse:
        if not self._repository.delete(user_id):
            raise NotFound()
        return MessageResponse(message="User deleted successfully")
