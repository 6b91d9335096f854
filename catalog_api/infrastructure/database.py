"""Database configuration and session management.

Provides the async SQLAlchemy engine and session factory, owned by a
``Database`` handle that the application connects at startup and disposes
at shutdown.
"""

import asyncio
import re
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

logger = structlog.get_logger()

# Base class for models
Base = declarative_base()


def mask_database_url(url: str) -> str:
    """Hide the password part of a database URL for logging."""
    return re.sub(r"(://[^:/@]+):([^@]+)@", r"\1:****@", url)


class Database:
    """Owned handle around the async engine and its session factory.

    Example usage:
        database = Database(settings.database_url)
        await database.connect(retries=5)
        async with database.session() as session:
            ...
        await database.dispose()
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        """Initialize database handle.

        Args:
            url: SQLAlchemy async database URL.
            echo: Whether to echo SQL statements.
        """
        self.url = url
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._echo = echo

    @property
    def engine(self) -> AsyncEngine:
        """Get the engine, creating it lazily."""
        if self._engine is None:
            self._create_engine()
        return self._engine

    def _create_engine(self) -> None:
        """Create the engine and bind the session factory to it."""
        self._engine = create_async_engine(
            self.url,
            echo=self._echo,
            pool_pre_ping=True,
        )
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def connect(
        self,
        retries: int = 5,
        backoff_seconds: float = 1.0,
        create_schema: bool = False,
    ) -> None:
        """Verify connectivity, retrying with exponential backoff.

        Args:
            retries: Number of attempts before giving up.
            backoff_seconds: Initial delay between attempts.
            create_schema: Create missing tables after connecting.

        Raises:
            SQLAlchemyError: If the database stays unreachable.
        """
        attempts = max(retries, 1)
        delay = backoff_seconds

        for attempt in range(1, attempts + 1):
            logger.info(
                "Connecting to database",
                url=mask_database_url(self.url),
                attempt=attempt,
            )
            try:
                async with self.engine.begin() as conn:
                    await conn.execute(text("SELECT 1"))
                    if create_schema:
                        await conn.run_sync(Base.metadata.create_all)
            except (SQLAlchemyError, OSError) as e:
                logger.warning(
                    "Database connection failed",
                    attempt=attempt,
                    error=str(e),
                )
                if attempt == attempts:
                    raise
                await asyncio.sleep(delay)
                delay *= 2
            else:
                logger.info("Database connection established")
                return

    async def ping(self) -> bool:
        """Check database connectivity.

        Returns:
            True if a trivial query succeeds.
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError):
            return False
        return True

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get database session.

        Commits on success and rolls back on error.

        Yields:
            AsyncSession for database operations.
        """
        if self._session_factory is None:
            self._create_engine()
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def dispose(self) -> None:
        """Release all pooled connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connection closed")
