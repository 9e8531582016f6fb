"""FastAPI application exposing the GraphQL endpoint and a health check."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from my_expenses import __version__
from my_expenses.config import Settings, load_settings
from my_expenses.database import Database
from my_expenses.graphql_api import build_graphql_router

LOG = logging.getLogger(__name__)

SERVICE_NAME = "my-expenses-api"


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
) -> FastAPI:
    """Build the application around an explicitly provided database.

    When ``database`` is omitted one is created from ``settings`` and disposed
    on shutdown; a caller-provided database stays open.
    """

    settings = settings or load_settings()
    owns_database = database is None
    db = database or Database(settings.database_url, echo=settings.echo_sql)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        db.create_schema()
        LOG.info("%s %s started (environment=%s)", SERVICE_NAME, __version__, settings.environment)
        yield
        if owns_database:
            db.dispose()

    app = FastAPI(title="My Expenses API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = db
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(
        build_graphql_router(db, graphql_ide=not settings.is_production),
        prefix="/graphql",
    )

    @app.get("/health", tags=["system"])
    def healthcheck() -> JSONResponse:
        timestamp = datetime.now(tz=UTC).isoformat()
        if db.ping():
            return JSONResponse(
                {"status": "healthy", "timestamp": timestamp, "service": SERVICE_NAME}
            )
        return JSONResponse(
            {
                "status": "unhealthy",
                "error": "Database connection failed",
                "timestamp": timestamp,
            },
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return app


__all__ = ["SERVICE_NAME", "create_app"]
