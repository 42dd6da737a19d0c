"""Database handle and declarative base."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from payhook.core.config import Settings


class Base(DeclarativeBase):
    """Declarative base for all models."""


class Database:
    """Process-wide store handle.

    Built once at startup and handed to every component that needs the
    store. Creating the engine does not connect; the first session does.
    """

    def __init__(self, url: str, **engine_kwargs: Any) -> None:
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            echo=settings.database_echo,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session, rolling back if the block raises."""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> bool:
        """Check store connectivity."""
        async with self.session() as session:
            await session.execute(text("SELECT 1"))
        return True

    async def create_schema(self) -> None:
        """Create all tables (tests and first-run bootstrap)."""
        # Register models on the metadata
        import payhook.db.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
