"""Bounded retry for transient database connection failures."""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError

from standup.errors import AppError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3

_CONNECTION_MARKERS = (
    "tenant or user not found",
    "connection",
    "econnrefused",
    "connection refused",
)


def is_database_connection_error(error: BaseException) -> bool:
    """Return True when ``error`` looks like the store being unreachable."""
    if isinstance(error, AppError):
        return False
    if isinstance(error, (ConnectionError, TimeoutError)):
        return True
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return True
    message = str(error).lower()
    return any(marker in message for marker in _CONNECTION_MARKERS)


async def with_db_retry(
    fn: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> T:
    """
    Await ``fn()`` and retry it on connection failures.

    At most ``max_attempts`` calls are made (3 means 2 retries), with no
    delay between them. Any other exception propagates immediately.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return await fn()
        except Exception as e:
            if attempt >= max_attempts or not is_database_connection_error(e):
                raise
            logger.warning(
                f"Database connection failed (attempt {attempt}/{max_attempts}), retrying: {e}"
            )
    raise RuntimeError("max_attempts must be at least 1")
