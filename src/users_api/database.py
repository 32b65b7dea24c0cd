"""Database setup for storing user records."""

import logging
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def create_db_engine(url: str) -> Engine:
    """Build an engine for ``url``.

    sqlite engines get the foreign key pragma on every new connection. A file
    database has its parent directory created; an in-memory database keeps a
    single shared connection so every session sees the same tables.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(url, future=True, pool_pre_ping=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if parsed.database in (None, "", ":memory:"):
        kwargs["poolclass"] = StaticPool
    else:
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, future=True, **kwargs)
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, future=True)


engine = create_db_engine(settings.sqlalchemy_url())
SessionLocal = create_session_factory(engine)


def init_db(bind: Engine = engine) -> None:
    """Create database tables if they do not exist."""
    # registers the users table on Base.metadata
    from .models import user  # noqa: F401

    Base.metadata.create_all(bind=bind)
    logger.info("database ready at %s", bind.url.render_as_string(hide_password=True))
