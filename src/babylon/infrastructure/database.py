"""Database access helpers: retry for transient query failures and health checks"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from babylon.domain.config.retry import RetryConfig
from babylon.infrastructure.retry import retry

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DB_RETRY = RetryConfig(max_attempts=3, initial_delay=0.1, max_delay=2.0)

_RETRYABLE_DB_MARKERS = (
    "connection",
    "timeout",
    "econnrefused",
    "econnreset",
    # Serverless Postgres pool phrasing
    "can't reach database server",
    "connection pool timeout",
)


def is_retryable_db_error(error: Any) -> bool:
    """Check if a database error is retryable (connection and pool timeouts)"""
    if not isinstance(error, Exception):
        return False
    message = str(error).lower()
    return any(marker in message for marker in _RETRYABLE_DB_MARKERS)


async def with_db_retry(
    operation: Callable[[], Awaitable[T]],
    context: Optional[str] = None,
    config: Optional[RetryConfig] = None,
    *,
    sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
) -> T:
    """Execute a database operation with automatic retry for transient errors

    Args:
        operation: Zero-argument callable returning an awaitable query
        context: Free-form label included in retry log lines
        config: Retry configuration (defaults to 3 attempts, 0.1s, 2s cap)
        sleep: Optional sleep override

    Returns:
        The operation's result
    """

    def _log_retry(error: Exception, attempt: int) -> None:
        logger.warning(f"Database retry attempt {attempt} (context={context}): {error}")

    return await retry(
        operation,
        config or DEFAULT_DB_RETRY,
        is_retryable=is_retryable_db_error,
        on_retry=_log_retry,
        sleep=sleep,
    )


@dataclass
class DatabaseHealth:
    """Outcome of a connectivity probe"""

    healthy: bool
    latency_ms: float
    error: Optional[str] = None


async def check_database_health(ping: Callable[[], Awaitable[Any]]) -> DatabaseHealth:
    """Check database connectivity

    Args:
        ping: Zero-argument callable running a trivial query (e.g. ``SELECT 1``)

    Returns:
        DatabaseHealth; failures are reported, not raised
    """
    start = time.monotonic()
    try:
        await ping()
    except Exception as e:
        latency_ms = (time.monotonic() - start) * 1000
        logger.error(f"Database health check failed: {e}")
        return DatabaseHealth(healthy=False, latency_ms=latency_ms, error=str(e) or "Unknown error")
    return DatabaseHealth(healthy=True, latency_ms=(time.monotonic() - start) * 1000)
