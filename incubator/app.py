"""
FastAPI application -- incubator records API.

Run locally:
    uvicorn incubator.app:app --reload --port 8000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from incubator import config
from incubator.auth import StaticTokenResolver, TokenResolver
from incubator.database import Database
from incubator.routes import admin, meetings, migration, startups

logger = logging.getLogger(__name__)


def create_app(
    database: Optional[Database] = None,
    token_resolver: Optional[TokenResolver] = None,
) -> FastAPI:
    """Build the app. Without arguments everything comes from ``incubator.config``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or Database(config.DATABASE_URL, echo=config.DATABASE_ECHO)
        await db.init_db()
        app.state.database = db
        logger.info("Database ready (%s)", "sqlite" if db.is_sqlite else "postgresql")

        yield

        await db.dispose()
        logger.info("Database connections closed")

    app = FastAPI(
        title="Incubator Records API",
        version="1.0.0",
        description="Startup incubation records and legacy export migration",
        lifespan=lifespan,
    )
    app.state.token_resolver = token_resolver or StaticTokenResolver(
        admin_tokens=config.ADMIN_API_TOKENS,
        guest_tokens=config.GUEST_API_TOKENS,
    )

    app.include_router(migration.router)
    app.include_router(startups.router)
    app.include_router(meetings.router)
    app.include_router(admin.router)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

app = create_app()
