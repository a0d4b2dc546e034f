"""
Database session, engine and transient-error retry.

The engine's pool is shared by every request; repository functions are wrapped in
retry_transient so a dropped MySQL connection costs a short retry instead of a 500.
"""
import functools
import logging
import time
from typing import Any, Callable, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from portal.config import settings
from portal.core.errors import StoreError

logger = logging.getLogger(__name__)

# MySQL client/server error codes worth retrying:
# 2003 can't connect, 2005 unknown host, 2006 server gone away, 2013 lost connection, 1040 too many connections
TRANSIENT_ERROR_CODES = frozenset({2003, 2005, 2006, 2013, 1040})
# Subset after which pooled connections are suspect: drop the pool, it is rebuilt on next checkout
POOL_RESET_ERROR_CODES = frozenset({2003, 2006, 2013, 1040})

F = TypeVar("F", bound=Callable[..., Any])

_sleep = time.sleep


def _utc_connect_args(url: str) -> dict[str, Any]:
    # created_at defaults are NOW() in the session time zone and come back naive; pin it to UTC
    if url.startswith("mysql"):
        return {"init_command": "SET time_zone = '+00:00'"}
    if url.startswith("postgresql"):
        return {"options": "-c timezone=utc"}
    return {}


def _engine_kwargs(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": 0,
        "pool_pre_ping": True,
        "pool_recycle": settings.db_pool_recycle_seconds,
        "pool_timeout": 30,
        "connect_args": _utc_connect_args(url),
    }


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def dispose_engine() -> None:
    """Close every pooled connection (app shutdown)."""
    engine.dispose()


def driver_error_code(exc: DBAPIError) -> int | None:
    """MySQL drivers put the numeric error code first in the exception args."""
    args = getattr(exc.orig, "args", None) or ()
    if args and isinstance(args[0], int):
        return args[0]
    return None


def retry_transient(fn: F) -> F:
    """
    Run fn(db, ...) with bounded retry on transient connection errors.

    Linear backoff (attempt * DB_RETRY_BACKOFF_SECONDS). Non-transient errors are not retried.
    Whatever SQLAlchemy error escapes is re-raised as StoreError.
    """

    @functools.wraps(fn)
    def wrapper(db: Session, *args: Any, **kwargs: Any) -> Any:
        attempts = max(1, settings.db_retry_attempts)
        for attempt in range(1, attempts + 1):
            try:
                return fn(db, *args, **kwargs)
            except OperationalError as e:
                db.rollback()
                code = driver_error_code(e)
                transient = e.connection_invalidated or code in TRANSIENT_ERROR_CODES
                if not transient or attempt == attempts:
                    raise StoreError(f"{fn.__name__} failed") from e
                delay = attempt * settings.db_retry_backoff_seconds
                logger.warning(
                    "[db retry] %s attempt %s/%s failed with code %s; retrying in %.1fs",
                    fn.__name__, attempt, attempts, code, delay,
                )
                if e.connection_invalidated or code in POOL_RESET_ERROR_CODES:
                    try:
                        db.get_bind().dispose()
                    except Exception as close_err:
                        logger.error("Could not dispose connection pool: %s", close_err)
                _sleep(delay)
            except SQLAlchemyError as e:
                db.rollback()
                raise StoreError(f"{fn.__name__} failed") from e
        raise StoreError(f"{fn.__name__} failed after {attempts} attempts")

    return wrapper  # type: ignore[return-value]
