"""Data access layer for user records."""

import logging
from typing import List, Optional

from passlib.context import CryptContext
from passlib.exc import PasswordSizeError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import DuplicateEmail, StoreError, ValidationError
from .models.schemas import UserInput, UserOutput
from .models.user import User
from .security import (
    DEFAULT_ROUNDS,
    get_password_hash,
    make_password_context,
    verify_password,
)

logger = logging.getLogger(__name__)

# every read path returns these columns only, never the password hash
OUTPUT_COLUMNS = (User.id, User.username, User.email, User.created_at, User.updated_at)

# ids outside a signed 64-bit integer can never match a row
MIN_ID = -(2**63)
MAX_ID = 2**63 - 1


def _handle_store_error(session: Session, exc: Exception, message: str) -> None:
    """Rollback the session, log the cause and raise a StoreError."""
    session.rollback()
    logger.exception("%s", message, exc_info=exc)
    raise StoreError(message) from exc


class UserRepository:
    """Repository for CRUD operations on the users table.

    Every call opens its own session from ``session_factory`` and closes it
    before returning; nothing is cached between calls. Check-then-act steps
    (email check before insert, existence check before update/delete) run in
    separate statements, so concurrent writers can race between them; the
    unique constraints surface a lost race as a StoreError.
    """

    def __init__(self, session_factory: sessionmaker, rounds: int = DEFAULT_ROUNDS):
        self._session_factory = session_factory
        self._pwd_context: CryptContext = make_password_context(rounds)

    def _hash(self, password: str) -> str:
        try:
            return get_password_hash(password, self._pwd_context)
        except PasswordSizeError as exc:
            raise ValidationError(
                f"Password must be at most {exc.max_size} characters long"
            ) from exc

    def find_all(self) -> List[UserOutput]:
        session = self._session_factory()
        try:
            rows = session.query(*OUTPUT_COLUMNS).all()
            return [UserOutput.model_validate(row) for row in rows]
        except SQLAlchemyError as exc:
            _handle_store_error(session, exc, "Failed to retrieve users")
        finally:
            session.close()

    def find_by_id(self, user_id: int) -> Optional[UserOutput]:
        if not MIN_ID <= user_id <= MAX_ID:
            return None
        session = self._session_factory()
        try:
            row = session.query(*OUTPUT_COLUMNS).filter(User.id == user_id).first()
            return UserOutput.model_validate(row) if row else None
        except SQLAlchemyError as exc:
            _handle_store_error(session, exc, f"Failed to retrieve user with id {user_id}")
        finally:
            session.close()

    def find_by_email(self, email: str) -> Optional[User]:
        """Return the full row, hash included. Internal use only."""
        session = self._session_factory()
        try:
            return session.query(User).filter(User.email == email).first()
        except SQLAlchemyError as exc:
            _handle_store_error(session, exc, f"Failed to retrieve user with email {email}")
        finally:
            session.close()

    def create(self, data: UserInput) -> UserOutput:
        if self.find_by_email(data.email):
            raise DuplicateEmail()

        hashed = self._hash(data.password)
        session = self._session_factory()
        try:
            user = User(username=data.username, email=data.email, password=hashed)
            session.add(user)
            session.flush()
            user_id = user.id
            session.commit()
        except SQLAlchemyError as exc:
            _handle_store_error(session, exc, "Failed to create user")
        finally:
            session.close()

        created = self.find_by_id(user_id)
        if created is None:
            logger.error("user %s missing right after insert", user_id)
            raise StoreError("Failed to retrieve created user")
        logger.info("created user %s", user_id)
        return created

    def update(self, user_id: int, changes: dict) -> Optional[UserOutput]:
        """Apply ``changes`` to the given user and return the new output.

        Only the keys present in ``changes`` are written. A password is hashed
        before it is stored. Returns None when the user does not exist.
        """
        if self.find_by_id(user_id) is None:
            return None

        values = dict(changes)
        if values.get("password") is not None:
            values["password"] = self._hash(values["password"])
        values["updated_at"] = func.now()

        session = self._session_factory()
        try:
            session.query(User).filter(User.id == user_id).update(
                values, synchronize_session=False
            )
            session.commit()
        except SQLAlchemyError as exc:
            _handle_store_error(session, exc, f"Failed to update user with id {user_id}")
        finally:
            session.close()

        return self.find_by_id(user_id)

    def delete(self, user_id: int) -> bool:
        if self.find_by_id(user_id) is None:
            return False

        session = self._session_factory()
        try:
            session.query(User).filter(User.id == user_id).delete(synchronize_session=False)
            session.commit()
        except SQLAlchemyError as exc:
            _handle_store_error(session, exc, f"Failed to delete user with id {user_id}")
        finally:
            session.close()
        logger.info("deleted user %s", user_id)
        return True

    def validate_password(self, email: str, password: str) -> Optional[User]:
        """Return the user when ``password`` matches the stored hash, else None."""
        user = self.find_by_email(email)
        if user is None:
            return None
        try:
            valid = verify_password(password, user.password, self._pwd_context)
        except PasswordSizeError:
            # longer than any password that could have been stored
            return None
        except (TypeError, ValueError) as exc:
            logger.exception("stored hash for %s could not be checked", email)
            raise StoreError("Failed to validate password") from exc
        return user if valid else None
