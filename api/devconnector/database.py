"""Database engine, sessions and schema migrations."""

import asyncio
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from alembic.command import upgrade
from alembic.config import Config
from devconnector.config import settings

API_ROOT = Path(__file__).resolve().parents[1]


def is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def make_engine(url: str, **options: Any) -> AsyncEngine:
    """
    Build an async engine for PostgreSQL (asyncpg) or SQLite (aiosqlite).

    Models only use portable column types, so both backends share one schema.
    SQLite does not enforce foreign keys unless asked to on every connection.
    """
    if not is_sqlite(url):
        options.setdefault("pool_pre_ping", True)

    async_engine = create_async_engine(url, echo=False, **options)

    if is_sqlite(url):

        @event.listens_for(async_engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return async_engine


engine = make_engine(settings.database_url)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


def _alembic_config(db_url: str) -> Config:
    config = Config(str(API_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(API_ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", db_url)
    return config


async def init_db(db_url: str | None = None) -> None:
    """Upgrade the schema to the latest revision. Alembic runs off the event loop."""
    config = _alembic_config(db_url or settings.database_url)
    await asyncio.to_thread(upgrade, config, "head")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session, committed on success and rolled back on error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
