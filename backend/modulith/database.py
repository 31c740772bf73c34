"""
Modulith Backend — Database Client
===================================

What:  Async SQLAlchemy engine + session factory wrapped in an explicit
       `Database` client, the declarative `Base`, and the FastAPI session
       dependency.
How:   `create_app()` constructs exactly one `Database` per application and
       stores it on `app.state.database`. Request handlers receive a session
       through `Depends(get_db_session)`; repository functions take that
       session as their first argument.
When:  Engine is created with the app; sessions are created per-request;
       the engine is disposed on shutdown.

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from settings.
    pool_recycle=3600 recycles connections every hour.
    Acquire/release is left entirely to SQLAlchemy's pool.
    SQLite URLs (used by the test suite) get no pool options.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncGenerator, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from starlette.requests import Request

from modulith.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every module's models inherit from this class so that they share one
    metadata object (read by Alembic for migrations and by the test suite
    to create tables).
    """
    pass


@dataclass(frozen=True)
class ConnectionStatus:
    """Outcome of a store connectivity check."""

    connected: bool
    error: Optional[str] = None


class Database:
    """
    Store client with a defined lifetime: created once, disposed once.

    Args:
        url: Async SQLAlchemy URL. Defaults to `settings.database_url`.
        config: Settings used for pool sizing and SQL echo.
        **engine_kwargs: Passed straight to `create_async_engine`
            (the test suite passes `poolclass=StaticPool` here).
    """

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        config: Optional[Settings] = None,
        **engine_kwargs: Any,
    ) -> None:
        config = config or default_settings
        self.url = url or config.database_url

        options: dict[str, Any] = {"echo": config.log_level == "DEBUG"}
        if not self.url.startswith("sqlite"):
            options.update(
                pool_size=config.db_pool_size,
                max_overflow=config.db_max_overflow,
                pool_pre_ping=config.db_pool_pre_ping,
                pool_recycle=3600,
            )
        options.update(engine_kwargs)

        self._engine = create_async_engine(self.url, **options)
        # expire_on_commit=False: attributes stay loaded after commit so the
        # controller can serialize the returned entity outside the session
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Provide a session scope.

        Repository functions commit their own writes; this scope only rolls
        back whatever is left uncommitted when an exception escapes, and
        always returns the connection to the pool.
        """
        async with self._session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def check_connection(self) -> ConnectionStatus:
        """
        Check the store with `SELECT 1`.

        Never raises: failures are reported in the returned status so the
        caller decides whether they are fatal (at boot they are not).
        """
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return ConnectionStatus(connected=True)
        except Exception as exc:
            return ConnectionStatus(connected=False, error=str(exc) or type(exc).__name__)

    async def dispose(self) -> None:
        """Close every pooled connection (called during shutdown)."""
        await self._engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The session comes from the `Database` client the app was built with
    (`request.app.state.database`), never from module-level state.

    Example usage in a controller:
        async def list_tasks(session: AsyncSession = Depends(get_db_session)):
            return await service.get_all_tasks(session)
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
