"""
Database configuration and connection management for the task manager service.
Wraps the async SQLAlchemy engine and session factory in an explicitly
constructed object with a connect/disconnect lifecycle.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
)
from sqlalchemy.pool import StaticPool
import structlog

from .config import Settings
from .exceptions import ServiceError
from ..models import Base

logger = structlog.get_logger()


class Database:
    """Owns the engine and hands out sessions."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected")
        return self._engine

    def _engine_options(self) -> dict:
        if self.settings.is_sqlite:
            # One shared connection so in-memory databases survive across sessions
            return {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }

        return {
            "pool_size": self.settings.DATABASE_POOL_SIZE,
            "max_overflow": self.settings.DATABASE_MAX_OVERFLOW,
            "pool_timeout": self.settings.DATABASE_POOL_TIMEOUT,
            "pool_pre_ping": True,  # Validate connections before use
            "pool_recycle": self.settings.DATABASE_POOL_RECYCLE,
        }

    async def connect(self) -> None:
        """Create the engine and, if configured, the schema."""
        if self._engine is not None:
            return

        self._engine = create_async_engine(
            self.settings.DATABASE_URL,
            echo=self.settings.DEBUG,
            **self._engine_options()
        )
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False
        )

        if self.settings.DATABASE_CREATE_TABLES:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        logger.info("Database connected", sqlite=self.settings.is_sqlite)

    async def disconnect(self) -> None:
        """Close all database connections on shutdown."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database connections closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide an async session.
        Commits pending work on success and rolls back on error.
        """
        if self._session_factory is None:
            raise RuntimeError("Database is not connected")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                if not isinstance(e, ServiceError):
                    logger.error("Database session error", error=str(e))
                raise

    async def check_connection(self) -> bool:
        """Check if database connection is healthy."""
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return False
