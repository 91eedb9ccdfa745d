"""
Retry with exponential backoff for SQLite lock contention.

Several pipeline runs may write to the same SQLite file at once; a write that
hits "database is locked" is retried a few times before the error propagates.
"""

import sqlite3
from collections.abc import Callable
from typing import TypeVar

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from supplieriq.kernel.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def retry_on_sqlite_lock(
    max_attempts: int = 3,
    min_wait_ms: int = 50,
    max_wait_ms: int = 1000,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Retry decorator for sqlite3.OperationalError

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        min_wait_ms: Minimum wait between attempts in milliseconds
        max_wait_ms: Maximum wait between attempts in milliseconds

    Example:
        @retry_on_sqlite_lock()
        def _save_suggestions(self, rows):
            ...
    """
    return retry(
        retry=retry_if_exception_type(sqlite3.OperationalError),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=1,
            min=min_wait_ms / 1000.0,
            max=max_wait_ms / 1000.0,
        ),
        before_sleep=lambda retry_state: logger.warning(
            "SQLite lock detected, retrying",
            attempt=retry_state.attempt_number,
            exception=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        ),
        reraise=True,
    )
