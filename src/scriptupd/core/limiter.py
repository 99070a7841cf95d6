"""Bounded-parallelism gate with a minimum delay between launches.

``ConcurrencyLimiter`` runs coroutines so that no more than ``concurrency``
are active at once and two consecutive starts are at least ``delay`` seconds
apart, even when a slot is free. Waiting calls launch in submission order.
"""

import asyncio
import functools
from collections import deque
from typing import Awaitable, Callable, ParamSpec, TypeVar

from scriptupd.logger import get_logger

logger = get_logger("limiter")

P = ParamSpec("P")
R = TypeVar("R")


class ConcurrencyLimiter:
    """FIFO limiter for async units of work.

    Example:
        >>> limiter = ConcurrencyLimiter(concurrency=2, delay=0.25)
        >>> result = await limiter.run(fetch, "https://example.com/a.user.js")

    Thread safety:
        Not thread-safe. All calls must come from the same event loop.
    """

    def __init__(self, concurrency: int = 2, delay: float = 0.0):
        """
        Initialize the limiter.

        Args:
            concurrency: Maximum number of calls running at once
            delay: Minimum seconds between the starts of two calls
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency
        self.delay = delay
        self._active = 0
        self._waiters: deque[asyncio.Future] = deque()
        self._next_launch = 0.0

    @property
    def active(self) -> int:
        """Number of calls currently holding a slot."""
        return self._active

    @property
    def queued(self) -> int:
        """Number of calls waiting for a slot."""
        return sum(1 for waiter in self._waiters if not waiter.done())

    async def run(self, fn: Callable[P, Awaitable[R]], *args: P.args, **kwargs: P.kwargs) -> R:
        """
        Run ``fn(*args, **kwargs)`` once a slot is free and the launch delay has passed.

        Exceptions raised by ``fn`` propagate to this caller only.
        """
        await self._acquire()
        try:
            await self._wait_launch_slot()
            return await fn(*args, **kwargs)
        finally:
            self._release()

    async def _acquire(self) -> None:
        if self._active < self.concurrency and not self.queued:
            self._active += 1
            return
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            # The releasing call hands its slot over, so _active is unchanged
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                self._release()
            raise

    async def _wait_launch_slot(self) -> None:
        # Reserve the launch time before suspending so queued calls keep their order
        loop = asyncio.get_running_loop()
        now = loop.time()
        start = max(now, self._next_launch)
        self._next_launch = start + self.delay
        if start > now:
            await asyncio.sleep(start - now)

    def _release(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._active -= 1


def limit_concurrency(
    fn: Callable[P, Awaitable[R]], concurrency: int, delay: float = 0.0
) -> Callable[P, Awaitable[R]]:
    """
    Wrap an async function so its calls go through a ``ConcurrencyLimiter``.

    Args:
        fn: Async function to wrap
        concurrency: Maximum number of concurrent calls
        delay: Minimum seconds between the starts of two calls

    Returns:
        Async function with the same signature as ``fn``
    """
    limiter = ConcurrencyLimiter(concurrency, delay)

    @functools.wraps(fn)
    async def limited(*args: P.args, **kwargs: P.kwargs) -> R:
        return await limiter.run(fn, *args, **kwargs)

    limited.limiter = limiter  # type: ignore[attr-defined]
    return limited
