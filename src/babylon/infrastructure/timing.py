"""Timing utilities: cooperative sleep, race-based timeout, debounce and throttle.

All durations are in seconds.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_MESSAGE = "Operation timed out"


class OperationTimeoutError(TimeoutError):
    """Raised by with_timeout when the timer wins the race."""


async def sleep(seconds: float) -> None:
    """Sleep for at least ``seconds`` without blocking the event loop.

    Non-positive values yield control once and return.
    """
    await asyncio.sleep(max(seconds, 0))


def _log_orphan_outcome(task: "asyncio.Future[Any]") -> None:
    # Runs when an operation that lost the race finally settles
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning(f"Operation failed after its timeout had fired: {exc!r}")


async def with_timeout(
    operation: Callable[[], Awaitable[T]],
    timeout: float,
    message: str = DEFAULT_TIMEOUT_MESSAGE,
) -> T:
    """Race ``operation()`` against a timer.

    The operation's own outcome (value or exception) is forwarded unchanged when
    it settles first. When the timer fires first, OperationTimeoutError(message)
    is raised and the operation is left running in the background; it is not
    cancelled.

    Args:
        operation: Zero-argument callable returning an awaitable
        timeout: Seconds to wait before giving up
        message: Message of the timeout error

    Returns:
        The operation's result

    Raises:
        OperationTimeoutError: If the timer elapses first
    """
    task = asyncio.ensure_future(operation())
    done, _ = await asyncio.wait({task}, timeout=max(timeout, 0))
    if task in done:
        return task.result()

    task.add_done_callback(_log_orphan_outcome)
    raise OperationTimeoutError(message)


def debounce(fn: Callable[..., Any], delay: float) -> Callable[..., None]:
    """Delay calls to ``fn`` until ``delay`` seconds pass without a new call.

    Must be called from a running event loop; only the last call of a burst runs.
    """
    handle: Optional[asyncio.TimerHandle] = None

    def wrapper(*args: Any) -> None:
        nonlocal handle
        if handle is not None:
            handle.cancel()
        loop = asyncio.get_running_loop()
        handle = loop.call_later(delay, fn, *args)

    return wrapper


def throttle(
    fn: Callable[..., Any],
    limit: float,
    clock: Callable[[], float] = time.monotonic,
) -> Callable[..., None]:
    """Run ``fn`` at most once per ``limit`` seconds; extra calls are dropped."""
    last_run: Optional[float] = None

    def wrapper(*args: Any) -> None:
        nonlocal last_run
        now = clock()
        if last_run is None or now - last_run >= limit:
            last_run = now
            fn(*args)

    return wrapper
