"""Database engine and session management.

A :class:`Database` is built once at process start and handed explicitly to
the application factory, the CLI and the tests; nothing here keeps a
module-level connection.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

LOG = logging.getLogger(__name__)

Base = declarative_base()


def _engine_options(url: str) -> dict[str, Any]:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if parsed.database in (None, "", ":memory:"):
        # Every session must see the same in-memory database.
        options["poolclass"] = StaticPool
    return options


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the SQLAlchemy engine and the session factory for one store.

    Args:
        url: SQLAlchemy database URL.
        echo: Log every emitted SQL statement.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.engine = create_engine(url, echo=echo, **_engine_options(url))
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    def create_schema(self) -> None:
        """Create database tables if they do not already exist."""
        from my_expenses import models  # noqa: F401  # register tables on Base.metadata

        Base.metadata.create_all(bind=self.engine)
        LOG.info("Database schema ready at %s", self.engine.url.render_as_string(hide_password=True))

    def drop_schema(self) -> None:
        from my_expenses import models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_session(self) -> Iterator[Session]:
        """FastAPI dependency that provides a database session."""
        with self.session_scope() as session:
            yield session

    def ping(self) -> bool:
        """Return ``True`` when ``SELECT 1`` succeeds against the store."""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError:
            LOG.exception("Database health check failed")
            return False
        return True

    def dispose(self) -> None:
        self.engine.dispose()


__all__ = ["Base", "Database"]
