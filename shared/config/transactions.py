import asyncio
from functools import wraps

import structlog
from sqlalchemy.exc import DBAPIError

from shared.errors import StorageUnavailableError

from .settings import TX_BACKOFF_SECONDS, TX_MAX_ATTEMPTS

logger = structlog.get_logger(__name__)

# Postgres SQLSTATEs for serialization failure and deadlock
PG_RETRY_SQLSTATES = {"40001", "40P01"}
RETRY_MESSAGES = (
    "database is locked",
    "deadlock detected",
    "could not serialize access",
)


def _sqlstate_from(exc: Exception):
    orig = getattr(exc, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_retryable(exc: Exception) -> bool:
    if not isinstance(exc, DBAPIError):
        return False
    if _sqlstate_from(exc) in PG_RETRY_SQLSTATES:
        return True
    msg = str(exc).lower()
    return any(k in msg for k in RETRY_MESSAGES)


def retry_on_tx_failure(max_attempts: int = TX_MAX_ATTEMPTS, backoff: float = TX_BACKOFF_SECONDS):
    """Re-run a whole unit of work when the database reports a lock conflict.

    The wrapped coroutine must take the ``AsyncSession`` as its first argument
    and must be safe to re-run from scratch: the session is rolled back before
    every retry. Business errors pass straight through.
    """
    def deco(fn):
        @wraps(fn)
        async def wrapper(db, *args, **kwargs):
            attempt = 0
            while True:
                attempt += 1
                try:
                    return await fn(db, *args, **kwargs)
                except DBAPIError as e:
                    await db.rollback()
                    if not is_retryable(e):
                        raise
                    if attempt >= max_attempts:
                        logger.error("tx_retries_exhausted", operation=fn.__qualname__, attempts=attempt)
                        raise StorageUnavailableError(attempt) from e
                    logger.warning("tx_conflict_retry", operation=fn.__qualname__, attempt=attempt, error=str(e))
                    await asyncio.sleep(backoff * attempt)
        return wrapper
    return deco
