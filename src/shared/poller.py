"""Convergence polling for asynchronously settling UI state.

After an action the site updates its DOM and server state on its own
schedule, so a single immediate check is flaky. ``poll_until`` re-runs a
check at a fixed interval until it passes or the timeout runs out, and on
timeout reports why the last attempt failed rather than a bare "timed out".

Usage:
    from src.shared.poller import poll_until, wait_for_count

    await poll_until(lambda: favorites.is_favorite_present(title), timeout=10)
    await wait_for_count(favorites.get_favorites_count, 3, timeout=15)
"""

import asyncio
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Optional, Union

from src.shared.constants import POLL

__all__ = [
    'ConvergenceCheck',
    'ConvergenceTimeout',
    'poll_until',
    'wait_for_count',
]

ConvergenceCheck = Callable[[], Union[Any, Awaitable[Any]]]

# Float tolerance for the attempt schedule (3 * 0.1 > 0.3 in binary)
_SCHEDULE_SLACK = 1e-9


class ConvergenceTimeout(Exception):
    """Raised when a check has not passed before the poll timeout.

    The message carries the last observed failure reason.

    Attributes:
        reason: Text of the last failure
        attempts: Number of times the check ran
        elapsed: Seconds spent polling
        last_error: Exception raised by the last attempt, if any
    """

    def __init__(
        self,
        reason: str,
        attempts: int,
        elapsed: float,
        last_error: Optional[BaseException] = None,
        description: Optional[str] = None,
    ):
        self.reason = reason
        self.attempts = attempts
        self.elapsed = elapsed
        self.last_error = last_error
        self.description = description
        prefix = f"{description}: " if description else ""
        super().__init__(
            f"{prefix}{reason} (after {attempts} attempt{'s' if attempts != 1 else ''} "
            f"in {elapsed:.1f}s)"
        )


async def poll_until(
    check: ConvergenceCheck,
    timeout: float,
    poll_interval: float = POLL.INTERVAL,
    description: Optional[str] = None,
) -> Any:
    """Run ``check`` until it passes or ``timeout`` elapses.

    A check fails by raising or by returning ``False``; any other result,
    including None from an assertion-style check, is success.

    Timing guarantees:
    - The check always runs at least once, even with a zero timeout.
    - Attempts follow a fixed schedule: attempt ``k`` is allowed only when
      ``k * poll_interval <= timeout``, so a check that first passes on call
      N converges whenever ``timeout >= N * poll_interval``, regardless of
      how long each check takes or how late ``asyncio.sleep`` wakes up.
    - No attempt begins after the deadline on the real clock.
    - Attempt starts are separated by at least ``poll_interval``.

    Args:
        check: Zero-argument callable, sync or async
        timeout: Seconds allowed for convergence
        poll_interval: Seconds between attempts
        description: Label used in logs and in the timeout message

    Returns:
        The value returned by the passing attempt

    Raises:
        ConvergenceTimeout: If no attempt passed in time, chained to the last
            attempt's exception when it raised one
        ValueError: If poll_interval is below POLL.MIN_INTERVAL
    """
    if poll_interval < POLL.MIN_INTERVAL:
        raise ValueError(
            f"poll_interval must be at least {POLL.MIN_INTERVAL}s, got {poll_interval}"
        )

    label = description or getattr(check, '__name__', 'condition')
    start = time.monotonic()
    deadline = start + timeout
    attempts = 0
    last_error: Optional[BaseException] = None
    reason = "check returned False"

    attempt_start = start

    while True:
        attempts += 1
        try:
            result = check()
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            last_error = e
            reason = str(e) or type(e).__name__
        else:
            if result is not False:
                if attempts > 1:
                    logging.debug(
                        f"[poll] {label} converged after {attempts} attempts "
                        f"({time.monotonic() - start:.1f}s)"
                    )
                return result
            last_error = None
            reason = "check returned False"

        if (attempts + 1) * poll_interval > timeout + _SCHEDULE_SLACK:
            break
        next_start = max(start + attempts * poll_interval, attempt_start + poll_interval)
        await asyncio.sleep(max(next_start - time.monotonic(), 0.0))
        attempt_start = time.monotonic()
        if attempt_start > deadline:
            break

    elapsed = time.monotonic() - start
    logging.debug(f"[poll] {label} did not converge: {reason}")
    raise ConvergenceTimeout(
        reason,
        attempts=attempts,
        elapsed=elapsed,
        last_error=last_error,
        description=description,
    ) from last_error


async def wait_for_count(
    read_count: Callable[[], Awaitable[int]],
    expected: int,
    timeout: float,
    poll_interval: float = POLL.INTERVAL,
    description: str = "count",
) -> int:
    """Poll an async counter until it equals ``expected``.

    Returns:
        The converged count

    Raises:
        ConvergenceTimeout: With the last observed count in its message
    """
    async def _check() -> int:
        actual = await read_count()
        if actual != expected:
            raise AssertionError(f"expected {description} {expected}, got {actual}")
        return actual

    return await poll_until(_check, timeout, poll_interval, description=description)
