"""Password hashing helpers built on passlib's bcrypt scheme."""

from passlib.context import CryptContext

DEFAULT_ROUNDS = 10


def make_password_context(rounds: int = DEFAULT_ROUNDS) -> CryptContext:
    """Return a bcrypt context that salts each hash and uses ``rounds`` as cost."""
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


pwd_context = make_password_context()


def get_password_hash(password: str, context: CryptContext = pwd_context) -> str:
    return context.hash(password)


def verify_password(
    plain_password: str, hashed_password: str, context: CryptContext = pwd_context
) -> bool:
    return context.verify(plain_password, hashed_password)
