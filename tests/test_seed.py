from users_api.models.schemas import UserInput
from users_api.repository import UserRepository
from users_api.seed import seed_users


def test_seed_replaces_existing_users(session_local):
    repository = UserRepository(session_local, rounds=4)
    repository.create(UserInput(username="stale", email="stale@example.com", password="secret1"))

    assert seed_users(session_local, rounds=4) == 2

    assert sorted(u.username for u in repository.find_all()) == ["admin", "user"]
    assert repository.validate_password("admin@example.com", "password123") is not None
    assert repository.validate_password("user@example.com", "password456") is not None


def test_seed_defaults_to_standard_cost(session_local):
    seed_users(session_local)

    repository = UserRepository(session_local, rounds=4)
    admin = repository.find_by_email("admin@example.com")
    assert admin.password.startswith("$2b$10$")
