"""
Async session manager.

``Database`` owns the process-wide engine and session maker. Each
``async with Database() as session`` block is one unit of work: it commits on
clean exit and rolls back when the block raises.
"""
import logging
from typing import Any, Optional

from sqlalchemy.engine.url import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.database.session_manager.exceptions import (
    DatabaseNotInitialized,
    DatabaseTransactionError,
)

logger = logging.getLogger(__name__)


class Database:
    """Async database session context manager."""

    _async_engine: Optional[AsyncEngine] = None
    _async_session_maker: Optional[async_sessionmaker] = None

    def __init__(self):
        self._session: Optional[AsyncSession] = None

    @classmethod
    def init(cls, async_db_url: URL | str, engine_kw: Optional[dict[str, Any]] = None):
        """
        Create the engine and session maker.

        Args:
            async_db_url: Async driver URL (asyncpg or aiosqlite)
            engine_kw: Extra keyword arguments for ``create_async_engine``
        """
        cls._async_engine = create_async_engine(async_db_url, **(engine_kw or {}))
        cls._async_session_maker = async_sessionmaker(
            bind=cls._async_engine, expire_on_commit=False, class_=AsyncSession
        )
        logger.debug(f"Database engine initialised for {cls._async_engine.url.drivername}")

    @classmethod
    def engine(cls) -> AsyncEngine:
        if cls._async_engine is None:
            raise DatabaseNotInitialized("Database.init() has not been called")
        return cls._async_engine

    @classmethod
    async def close(cls):
        """Dispose the engine and forget the session maker."""
        if cls._async_engine is not None:
            await cls._async_engine.dispose()
        cls._async_engine = None
        cls._async_session_maker = None

    async def __aenter__(self) -> AsyncSession:
        if self._async_session_maker is None:
            raise DatabaseNotInitialized("Database.init() has not been called")
        self._session = self._async_session_maker()
        return self._session

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                await self._session.commit()
            else:
                await self._session.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Failed to finalise database transaction: {e}")
            await self._session.rollback()
            raise DatabaseTransactionError(str(e)) from e
        finally:
            await self._session.close()
