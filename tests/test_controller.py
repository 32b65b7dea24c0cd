from datetime import datetime

import pytest

from users_api.controller import UserController, validate_user_data
from users_api.errors import NotFound, StoreError, ValidationError
from users_api.models.schemas import UserCreate, UserInput, UserOutput


def make_output(user_id=1, username="user1", email="user1@example.com"):
    now = datetime(2025, 1, 1)
    return UserOutput(id=user_id, username=username, email=email, created_at=now, updated_at=now)


class FakeRepository:
    """Records calls and returns canned results."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def _respond(self, name, *args):
        self.calls.append((name, args))
        if self.error:
            raise self.error
        return self.result

    def find_all(self):
        return self._respond("find_all")

    def find_by_id(self, user_id):
        return self._respond("find_by_id", user_id)

    def create(self, data):
        return self._respond("create", data)

    def update(self, user_id, changes):
        return self._respond("update", user_id, changes)

    def delete(self, user_id):
        return self._respond("delete", user_id)


VALID = {"username": "validuser", "email": "valid@example.com", "password": "password123"}


def test_get_all_users():
    users = [make_output(1), make_output(2, "user2", "user2@example.com")]
    repo = FakeRepository(result=users)

    assert UserController(repo).get_all_users() == users
    assert repo.calls == [("find_all", ())]


def test_get_all_users_propagates_errors():
    repo = FakeRepository(error=StoreError("Failed to retrieve users"))
    with pytest.raises(StoreError, match="Failed to retrieve users"):
        UserController(repo).get_all_users()


def test_get_user_by_id():
    user = make_output()
    repo = FakeRepository(result=user)

    assert UserController(repo).get_user_by_id(1) == user
    assert repo.calls == [("find_by_id", (1,))]


def test_get_user_by_id_not_found():
    with pytest.raises(NotFound, match="^User not found$"):
        UserController(FakeRepository(result=None)).get_user_by_id(999)


def test_create_user_passes_validated_input():
    created = make_output(3, "validuser", "valid@example.com")
    repo = FakeRepository(result=created)

    assert UserController(repo).create_user(VALID) == created
    assert repo.calls == [("create", (UserInput(**VALID),))]


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"username": "ab"}, "Username must be at least 3 characters long"),
        ({"username": "  ab  "}, "Username must be at least 3 characters long"),
        ({"username": None}, "Username must be at least 3 characters long"),
        ({"email": "invalid-email"}, "Valid email address is required"),
        ({"email": "user@localhost"}, "Valid email address is required"),
        ({"email": "us er@example.com"}, "Valid email address is required"),
        ({"email": "a@b@example.com"}, "Valid email address is required"),
        ({"email": "user@example.com\n"}, "Valid email address is required"),
        ({"email": ""}, "Valid email address is required"),
        ({"password": "12345"}, "Password must be at least 6 characters long"),
        ({"password": None}, "Password must be at least 6 characters long"),
    ],
)
def test_create_user_validation(overrides, message):
    repo = FakeRepository()

    with pytest.raises(ValidationError) as excinfo:
        UserController(repo).create_user({**VALID, **overrides})

    assert excinfo.value.message == message
    assert repo.calls == []


def test_validation_reports_first_failure_only():
    with pytest.raises(ValidationError, match="Username"):
        validate_user_data(UserCreate(username="a", email="bad", password="1"))


def test_loose_email_pattern_accepts_odd_addresses():
    for email in ("a@b.c", "first.last@sub.example.co.uk", "x@y.z.w"):
        assert validate_user_data(UserCreate(**{**VALID, "email": email})).email == email


def test_create_user_keeps_username_untrimmed():
    result = validate_user_data(UserCreate(**{**VALID, "username": " spaced "}))
    assert result.username == " spaced "


def test_create_user_propagates_repository_errors():
    repo = FakeRepository(error=StoreError("Failed to create user"))
    with pytest.raises(StoreError, match="Failed to create user"):
        UserController(repo).create_user(VALID)


def test_update_user():
    updated = make_output(1, "updateduser", "updated@example.com")
    repo = FakeRepository(result=updated)
    changes = {"username": "updateduser", "email": "updated@example.com"}

    assert UserController(repo).update_user(1, changes) == updated
    assert repo.calls == [("update", (1, changes))]


def test_update_user_requires_data():
    repo = FakeRepository()
    with pytest.raises(ValidationError, match="^No data provided for update$"):
        UserController(repo).update_user(1, {})
    assert repo.calls == []


def test_update_user_not_found():
    with pytest.raises(NotFound, match="User not found"):
        UserController(FakeRepository(result=None)).update_user(999, {"username": "newname"})


def test_update_skips_create_validation():
    repo = FakeRepository(result=make_output())
    UserController(repo).update_user(1, {"password": "1"})
    assert repo.calls == [("update", (1, {"password": "1"}))]


def test_delete_user():
    repo = FakeRepository(result=True)

    result = UserController(repo).delete_user(1)

    assert result.message == "User deleted successfully"
    assert repo.calls == [("delete", (1,))]


def test_delete_user_not_found():
    with pytest.raises(NotFound, match="User not found"):
        UserController(FakeRepository(result=False)).delete_user(999)
