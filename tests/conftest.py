import os

# must be set before users_api builds its default engine
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

from users_api.api import create_app
from users_api.config import Settings
from users_api.database import Base, create_db_engine, create_session_factory
from users_api.models.schemas import UserInput
from users_api.repository import UserRepository

# bcrypt's minimum cost keeps hashing fast in tests
TEST_ROUNDS = 4


@pytest.fixture
def session_local():
    """Provide an isolated in-memory database for each test."""
    engine = create_db_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def repository(session_local):
    return UserRepository(session_local, rounds=TEST_ROUNDS)


@pytest.fixture
def sample_input():
    return UserInput(username="newuser", email="newuser@example.com", password="password123")


@pytest.fixture
def client(session_local):
    settings = Settings(environment="test", bcrypt_rounds=TEST_ROUNDS)
    return TestClient(create_app(settings, session_factory=session_local))
