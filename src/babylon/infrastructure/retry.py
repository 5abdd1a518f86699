"""Retry executor built on tenacity.

Runs an async operation, retries transient failures with capped exponential
backoff and re-raises the original error once it gives up.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from babylon.domain.config.retry import RetryConfig
from babylon.domain.result import Err, Ok, Result
from babylon.infrastructure import timing

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRANSIENT_MARKERS = ("network", "timeout", "econnrefused", "econnreset")


def _status_of(error: Any) -> Optional[float]:
    """Extract a numeric ``status`` from an object or a mapping."""
    if isinstance(error, Mapping):
        status = error.get("status")
    else:
        status = getattr(error, "status", None)
    if isinstance(status, bool) or not isinstance(status, (int, float)):
        return None
    return status


def is_retryable_error(error: Any) -> bool:
    """Default check for retryable errors (network errors, timeouts, 5xx, 429).

    Args:
        error: Exception, or any object/mapping carrying a ``status``

    Returns:
        True if another attempt may succeed
    """
    if isinstance(error, BaseException):
        # Builtin connection/timeout errors are the native form of ECONNREFUSED & co.
        if isinstance(error, (ConnectionError, TimeoutError)):
            return True
        message = str(error).lower()
        if any(marker in message for marker in _TRANSIENT_MARKERS):
            return True

    status = _status_of(error)
    if status is None:
        return False
    return status >= 500 or status == 429


async def retry(
    operation: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    *,
    is_retryable: Optional[Callable[[Exception], bool]] = None,
    on_retry: Optional[Callable[[Exception, int], Any]] = None,
    sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
) -> T:
    """Execute an async operation with retry logic.

    The first retry waits ``initial_delay``; each following one waits the
    previous delay times ``multiplier``, capped at ``max_delay``.
    ``max_attempts`` counts the initial call.

    Args:
        operation: Zero-argument callable returning an awaitable
        config: Retry configuration (defaults: 3 attempts, 0.1s, 5s cap, x2)
        is_retryable: Predicate deciding whether an error is transient
            (defaults to is_retryable_error)
        on_retry: Called with (error, attempt) before each sleep; an exception
            raised here aborts the loop
        sleep: Awaitable sleep taking seconds (defaults to timing.sleep)

    Returns:
        The operation's result

    Raises:
        Exception: The original error of the last attempt, unwrapped
    """
    cfg = config or RetryConfig()
    predicate = is_retryable or is_retryable_error

    def _should_retry(exception: BaseException) -> bool:
        # Cancellation and interpreter exits are never retried
        if not isinstance(exception, Exception):
            return False
        return bool(predicate(exception))

    def _before_sleep(retry_state: RetryCallState) -> None:
        if retry_state.outcome is None:
            return
        exception = retry_state.outcome.exception()
        attempt = retry_state.attempt_number
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.debug(
            f"Attempt {attempt}/{cfg.max_attempts} failed: {exception!r}. "
            f"Retrying in {delay:.3f}s"
        )
        if on_retry is not None:
            on_retry(exception, attempt)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(cfg.max_attempts),
        wait=wait_exponential(
            multiplier=cfg.initial_delay,
            exp_base=cfg.multiplier,
            min=0,
            max=cfg.max_delay,
        ),
        retry=retry_if_exception(_should_retry),
        before_sleep=_before_sleep,
        reraise=True,
        sleep=sleep or timing.sleep,
    )
    # tenacity only awaits `async def` callables; lambdas and partials return awaitables
    async def _attempt() -> T:
        return await operation()

    return await retrying(_attempt)


async def try_catch(operation: Callable[[], Awaitable[T]]) -> Result:
    """Execute an async operation and return a Result instead of raising.

    Cancellation is not converted and still propagates.
    """
    try:
        value = await operation()
    except Exception as e:
        return Err(e)
    return Ok(value)
