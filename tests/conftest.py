"""Shared pytest configuration: in-memory databases and a GraphQL client."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Any

import pytest


def _insert_repo_root() -> None:
    """Make the repository root importable when the package is not installed."""

    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_insert_repo_root()

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from my_expenses.config import Settings  # noqa: E402
from my_expenses.database import Database  # noqa: E402
from my_expenses.server import create_app  # noqa: E402

GraphQLCall = Callable[..., dict[str, Any]]


def pytest_report_header(config: pytest.Config) -> Iterable[str]:  # pragma: no cover - pytest hook
    root = Path.cwd()
    log_level = os.environ.get("MY_EXPENSES_LOG_LEVEL", "INFO")
    return [f"my-expenses repo: {root}", f"MY_EXPENSES_LOG_LEVEL={log_level}"]


@pytest.fixture(autouse=True)
def _set_verbose_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MY_EXPENSES_LOG_LEVEL", "INFO")
    monkeypatch.delenv("MY_EXPENSES_JSON_LOGS", raising=False)


@pytest.fixture()
def database() -> Iterator[Database]:
    db = Database("sqlite://")
    db.create_schema()
    yield db
    db.drop_schema()
    db.dispose()


@pytest.fixture()
def db_session(database: Database) -> Iterator[Session]:
    connection = database.engine.connect()
    transaction = connection.begin()
    session: Session = database.session_factory(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture()
def settings() -> Settings:
    return Settings(environment="test", database_url="sqlite://", sql_echo=False)


@pytest.fixture()
def client(settings: Settings, database: Database) -> Iterator[TestClient]:
    app = create_app(settings, database=database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def graphql(client: TestClient) -> GraphQLCall:
    """Post a GraphQL document and return the decoded JSON body."""

    def _call(query: str, **variables: Any) -> dict[str, Any]:
        response = client.post("/graphql", json={"query": query, "variables": variables})
        assert response.status_code == 200, response.text
        return response.json()

    return _call
