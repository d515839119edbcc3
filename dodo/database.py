"""Database configuration and session management."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from dodo.config.settings import settings

# Import models so they are attached to Base.metadata before table creation
from dodo.models import Base

logger = logging.getLogger(__name__)


def create_engine(url: str | None = None) -> AsyncEngine:
    """Create an async engine with environment-appropriate pooling."""

    target_url = url or settings.database.url
    engine_options: dict[str, Any] = {
        "echo": settings.debug,
        "future": True,
    }

    if target_url.startswith("sqlite"):
        engine_options["connect_args"] = {"check_same_thread": False}
    else:
        engine_options["pool_pre_ping"] = True
        if settings.database.serverless or settings.debug:
            # Disable pooling when working with serverless databases (or in debug).
            engine_options["poolclass"] = NullPool

    return create_async_engine(target_url, **engine_options)


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory whose objects stay readable after commit."""

    return async_sessionmaker(bind, expire_on_commit=False, class_=AsyncSession)


engine: AsyncEngine = create_engine()

SessionFactory = create_session_factory(engine)


async def init_models(bind: AsyncEngine | None = None) -> None:
    """Create database tables if they do not exist."""

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Ensured database tables: %s", ", ".join(sorted(Base.metadata.tables)))


async def dispose_engine() -> None:
    """Dispose of the engine and release pooled connections."""

    await engine.dispose()
