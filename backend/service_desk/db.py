from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Annotated, Any, TypeVar

from fastapi import Depends
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from tenacity import AsyncRetrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

from service_desk.config import get_settings
from service_desk.exceptions import TransientStoreError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Serialization failure, deadlock, lock not available.
_TRANSIENT_SQLSTATES = frozenset({"40001", "40P01", "55P03"})
_SQLITE_BUSY_MARKERS = ("database is locked", "database is busy", "database table is locked")

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _enable_sqlite_immediate_transactions(engine: AsyncEngine) -> None:
    """Make every SQLite transaction take the write lock at BEGIN.

    The driver's own implicit BEGIN is disabled so that reads followed by
    writes in one transaction cannot interleave with another writer.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine with the transaction semantics the services rely on.

    SQLite serializes writers with BEGIN IMMEDIATE and waits up to the busy
    timeout for the lock. Other backends run at SERIALIZABLE isolation.
    """
    settings = get_settings()
    if make_url(database_url).get_backend_name() == "sqlite":
        engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"timeout": settings.store_busy_timeout_seconds},
        )
        _enable_sqlite_immediate_transactions(engine)
        return engine
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        isolation_level="SERIALIZABLE",
    )


def get_engine() -> AsyncEngine:
    """Return the singleton async engine, creating it on first call."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = build_engine(settings.database_url, echo=settings.debug)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the singleton async session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an async database session."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def dispose_engine() -> None:
    """Dispose the engine and reset singletons. Call on app shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


def is_transient_store_error(exc: BaseException) -> bool:
    """Return True for lock contention errors that are safe to retry."""
    if not isinstance(exc, DBAPIError):
        return False
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _TRANSIENT_SQLSTATES:
        return True
    message = str(orig).lower()
    return any(marker in message for marker in _SQLITE_BUSY_MARKERS)


def retry_on_busy(
    func: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    """Run a session-scoped service operation as one retryable unit.

    The wrapped coroutine takes the session as its first argument. Any
    exception rolls the session back so no partial write survives; busy
    errors are retried with exponential backoff and surface as
    TransientStoreError once the attempts are exhausted.
    """

    @functools.wraps(func)
    async def wrapper(session: AsyncSession, *args: Any, **kwargs: Any) -> T:
        settings = get_settings()
        retrying = AsyncRetrying(
            stop=stop_after_attempt(settings.store_retry_attempts),
            wait=wait_exponential(
                multiplier=settings.store_retry_backoff_seconds,
                max=settings.store_retry_max_backoff_seconds,
            ),
            retry=retry_if_exception(is_transient_store_error),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        async def _attempt() -> T:
            try:
                return await func(session, *args, **kwargs)
            except Exception:
                await session.rollback()
                raise

        try:
            return await retrying(_attempt)
        except DBAPIError as exc:
            if is_transient_store_error(exc):
                logger.error("%s gave up after %d attempts: %s", func.__name__, settings.store_retry_attempts, exc)
                raise TransientStoreError("The data store is busy. Please try again shortly.") from exc
            raise

    return wrapper
