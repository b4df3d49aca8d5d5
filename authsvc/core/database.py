"""
Database session management with async SQLAlchemy 2.0.

Provides:
- Async engine with connection pooling
- Session factory with proper lifecycle
- Dependency injection for route handlers
"""

from typing import AsyncGenerator

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from authsvc.config import settings

logger = structlog.get_logger(__name__)


# Base class for all ORM models
class Base(DeclarativeBase):
    """
    Base class for all database models.

    Provides:
    - Common metadata for all tables
    - Type hints for SQLAlchemy
    """
    pass


class DatabaseManager:
    """
    Manages database engine and session lifecycle.

    One engine per process; call init() at startup and close() at shutdown.
    """

    def __init__(self) -> None:
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def init(self, database_url: str | None = None) -> None:
        """
        Initialize database engine and session factory.

        Called during application startup (lifespan event) and by scripts.
        """
        logger.info("database_initializing")

        engine_kwargs: dict = {"pool_pre_ping": True}
        if settings.is_development:
            # Development: NullPool for simplicity, optional SQL echo
            engine_kwargs["poolclass"] = NullPool
            engine_kwargs["echo"] = settings.db_echo

        self._engine = create_async_engine(
            database_url or str(settings.database_url),
            **engine_kwargs,
        )

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Don't expire objects after commit
            autoflush=False,  # Manual control over flushes
        )

        logger.info("database_initialized")

    async def close(self) -> None:
        """
        Close database connections.

        Called during application shutdown (lifespan event).
        """
        if self._engine:
            await self._engine.dispose()
            logger.info("database_closed")

    @property
    def engine(self) -> AsyncEngine:
        """Get the database engine."""
        if not self._engine:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._engine

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session that commits on success and rolls back on error.

        Usage in FastAPI:
            @router.get("/users")
            async def get_users(db: AsyncSession = Depends(db_manager.get_session)):
                ...
        """
        if not self._session_factory:
            raise RuntimeError("Database not initialized. Call init() first.")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()  # Auto-commit on success
            except Exception:
                await session.rollback()  # Auto-rollback on error
                raise


# Global instance
db_manager = DatabaseManager()


# Convenience function for dependency injection
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        from authsvc.core.database import get_db

        @router.get("/users")
        async def list_users(db: AsyncSession = Depends(get_db)):
            ...
    """
    async for session in db_manager.get_session():
        yield session
