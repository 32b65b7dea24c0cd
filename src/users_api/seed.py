"""Sample users for local development."""

import logging
from typing import List, Tuple

from sqlalchemy.orm import sessionmaker

from .config import settings
from .database import SessionLocal, init_db
from .logger import configure_logging
from .models.user import User
from .security import DEFAULT_ROUNDS, get_password_hash, make_password_context

logger = logging.getLogger(__name__)

SAMPLE_USERS: List[Tuple[str, str, str]] = [
    ("admin", "admin@example.com", "password123"),
    ("user", "user@example.com", "password456"),
]


def seed_users(
    session_factory: sessionmaker = SessionLocal, rounds: int = DEFAULT_ROUNDS
) -> int:
    """Replace every row in ``users`` with the sample users.

    Returns the number of users inserted.
    """
    context = make_password_context(rounds)
    session = session_factory()
    try:
        session.query(User).delete()
        session.add_all(
            User(username=username, email=email, password=get_password_hash(password, context))
            for username, email, password in SAMPLE_USERS
        )
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Failed to seed users")
        raise
    finally:
        session.close()
    logger.info("seeded %d users", len(SAMPLE_USERS))
    return len(SAMPLE_USERS)


if __name__ == "__main__":
    configure_logging(settings.log_level)
    init_db()
    seed_users(rounds=settings.bcrypt_rounds)
