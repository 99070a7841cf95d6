"""
AutoUpdateScheduler - runs the batch checker periodically.

The interval comes from the ``auto_update`` option (days, 0 disables) and is
measured from the ``last_update`` timestamp, so a restart does not trigger an
early check. Exactly one timer is pending at any time.
"""

import asyncio
import time
from typing import Callable, Optional

from scriptupd.config import MAX_TIMER, SECONDS_PER_DAY
from scriptupd.domain.protocols import OptionStore
from scriptupd.logger import get_logger

from .checker import UpdateChecker

logger = get_logger("scheduler")


class AutoUpdateScheduler:
    """
    Triggers automatic update checks.

    On start it waits ``warmup_delay`` seconds, then recomputes the schedule.
    The schedule is recomputed whenever its timer fires and whenever the
    ``auto_update`` option changes.
    """

    def __init__(
        self,
        checker: UpdateChecker,
        options: OptionStore,
        *,
        warmup_delay: float = 20.0,
        max_timer: float = MAX_TIMER,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the AutoUpdateScheduler.

        Args:
            checker: Batch checker run in automatic mode
            options: Source of ``auto_update`` and ``last_update``
            warmup_delay: Seconds to wait after start before the first recomputation
            max_timer: Upper bound of a single timer in seconds
            clock: Wall clock returning epoch seconds
        """
        self.checker = checker
        self.options = options
        self.warmup_delay = warmup_delay
        self.max_timer = max_timer
        self.clock = clock
        self._timer: asyncio.Task | None = None
        self._check_task: asyncio.Task | None = None
        self._unhook: Optional[Callable[[], None]] = None
        self.next_delay: float | None = None
        """Seconds until the pending timer fires, None when nothing is scheduled."""

    def start(self) -> None:
        """Schedule the warm-up and start following ``auto_update`` changes."""
        if self._unhook is None:
            self._unhook = self.options.hook_options(self._on_options_changed)
        self._set_timer(self.warmup_delay)
        logger.info(f"Auto-update scheduler started, first run in {self.warmup_delay:.0f}s")

    async def stop(self) -> None:
        """Cancel the pending timer and any automatic check still running."""
        if self._unhook is not None:
            self._unhook()
            self._unhook = None
        self._cancel_timer()
        if self._check_task and not self._check_task.done():
            self._check_task.cancel()
            try:
                await self._check_task
            except asyncio.CancelledError:
                pass
        logger.info("Auto-update scheduler stopped")

    @property
    def check_task(self) -> asyncio.Task | None:
        """The most recent automatic check, if any."""
        return self._check_task

    def reschedule(self) -> None:
        """Run a check if one is due and schedule the next recomputation."""
        interval = (float(self.options.get_option("auto_update") or 0)) * SECONDS_PER_DAY
        if not interval:
            self._cancel_timer()
            logger.debug("Auto-update disabled")
            return

        elapsed = self.clock() - float(self.options.get_option("last_update") or 0)
        if elapsed >= interval:
            self._run_check()
            elapsed = 0
        self._set_timer(min(self.max_timer, interval - elapsed))

    def _run_check(self) -> None:
        if self._check_task is not None and not self._check_task.done():
            logger.debug("Automatic update check still running, not starting another")
            return
        logger.info("Starting automatic update check")
        self._check_task = asyncio.create_task(self.checker.check_update())
        self._check_task.add_done_callback(self._log_check_result)

    def _set_timer(self, delay: float) -> None:
        self._cancel_timer()
        self.next_delay = delay
        self._timer = asyncio.create_task(self._fire_after(delay))
        logger.debug(f"Next auto-update recomputation in {delay:.0f}s")

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None
        self.next_delay = None

    async def _fire_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        # Detach first so reschedule() does not cancel the running timer
        self._timer = None
        self.next_delay = None
        self.reschedule()

    def _on_options_changed(self, changes: dict) -> None:
        if "auto_update" in changes:
            self.reschedule()

    @staticmethod
    def _log_check_result(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Automatic update check failed: {error!r}")
        else:
            logger.debug(f"Automatic update check updated {task.result()} script(s)")
