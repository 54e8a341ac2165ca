"""
Async metadata database connection management using SQLAlchemy 2.0.

Supports both:
- SQLite through aiosqlite (default, single file next to the service)
- PostgreSQL through asyncpg (set DATABASE_URL to a postgresql+asyncpg URL)
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool

from pdf_vault.core.config import settings

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Owns the async engine and session factory for one database URL.

    The engine is created lazily on first use, so constructing a manager
    never touches the database.
    """

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        self.database_url = database_url or settings.DATABASE_URL
        self.echo = settings.DB_ECHO if echo is None else echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def _create_engine(self) -> AsyncEngine:
        """Create the engine for the configured URL."""
        if self.is_sqlite:
            engine = create_async_engine(
                self.database_url,
                echo=self.echo,
                connect_args={"timeout": settings.DB_POOL_TIMEOUT},
            )
            _enable_sqlite_foreign_keys(engine)
            logger.info("Creating SQLite database engine")
            return engine

        # Log the dialect only, never the credentials embedded in the URL
        logger.info(
            f"Creating database engine: dialect={self.database_url.split(':', 1)[0]}, "
            f"pool_size={settings.DB_POOL_SIZE}"
        )
        return create_async_engine(
            self.database_url,
            poolclass=AsyncAdaptedQueuePool,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=True,
            echo=self.echo,
        )

    @property
    def engine(self) -> AsyncEngine:
        """Get the async engine, creating it on first access."""
        if self._engine is None:
            self._engine = self._create_engine()
            self._session_factory = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker:
        if self._session_factory is None:
            # Accessing the engine builds the factory alongside it
            self.engine
        return self._session_factory

    async def test_connection(self, timeout: float = 15.0) -> bool:
        """Test database connectivity with timeout."""
        try:
            async with asyncio.timeout(timeout):
                async with self.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
            logger.debug("Database connection test successful")
            return True
        except asyncio.TimeoutError:
            logger.error(f"Database connection test timed out after {timeout}s")
            return False
        except Exception as e:
            logger.error(f"Database connection test failed: {e}")
            return False

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get an async session with automatic commit/rollback.

        Usage:
            async with db.session() as session:
                result = await session.execute(...)
        """
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self):
        """Create all tables that do not exist yet."""
        from pdf_vault.models.db import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def drop_tables(self):
        """Drop all tables (for testing only)."""
        from pdf_vault.models.db import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Database tables dropped")

    async def close(self):
        """Dispose of the engine and its pooled connections."""
        if self._engine is not None:
            try:
                await self._engine.dispose()
            finally:
                self._engine = None
                self._session_factory = None
            logger.info("Database connections closed")


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
