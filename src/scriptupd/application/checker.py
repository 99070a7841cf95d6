"""Batch orchestrator: the ``CheckUpdate`` command."""

import asyncio
import time
from typing import Callable, Iterable, Optional, Union

from scriptupd import messages
from scriptupd.core.limiter import limit_concurrency
from scriptupd.core.urls import get_script_update_urls
from scriptupd.domain.events import EventBus, UpdateBatchCompleted
from scriptupd.domain.protocols import Notifier, OptionStore, ScriptStore
from scriptupd.domain.types import CheckNote, CheckOutcome, Script, ScriptId
from scriptupd.logger import get_logger
from scriptupd.utils import ensure_list

from .registry import InFlightRegistry
from .worker import UpdateWorker

logger = get_logger("checker")


class UpdateChecker:
    """Checks a batch of scripts for updates and reports the results.

    Each script is checked by at most one task at a time: a request for a
    script whose check is still running joins that check. Checks run through
    a limiter so only a few requests hit update servers at once.

    Example:
        >>> checker = UpdateChecker(store, options, worker, registry, notifier)
        >>> updated = await checker.check_update()        # automatic: all scripts
        >>> updated = await checker.check_update([3, 7])  # manual: these scripts
    """

    def __init__(
        self,
        store: ScriptStore,
        options: OptionStore,
        worker: UpdateWorker,
        registry: InFlightRegistry,
        notifier: Notifier,
        *,
        concurrency: int = 2,
        launch_delay: float = 0.25,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the checker.

        Args:
            store: Storage of installed scripts
            options: User options (read and ``last_update`` written)
            worker: Worker running a single check
            registry: In-flight registry shared with the worker
            notifier: Receives the aggregated notes of a batch
            concurrency: Checks running at once
            launch_delay: Seconds between two check launches
            event_bus: Optional bus receiving UpdateBatchCompleted
            clock: Source of the ``last_update`` timestamp
        """
        self.store = store
        self.options = options
        self.worker = worker
        self.registry = registry
        self.notifier = notifier
        self.event_bus = event_bus
        self.clock = clock
        self._check_limited = limit_concurrency(worker.check, concurrency, launch_delay)

    async def check_update(self, ids: Union[ScriptId, Iterable[ScriptId], None] = None) -> int:
        """
        Check scripts for updates.

        Args:
            ids: One id or several; None checks every script (automatic mode)

        Returns:
            Number of scripts that received new code
        """
        is_auto = ids is None
        started_at = self.clock()
        scripts = self._select_scripts(ids)
        enabled_only = is_auto and bool(self.options.get_option("update_enabled_scripts_only"))

        jobs: list[asyncio.Task[CheckOutcome]] = []
        for script in scripts:
            urls = get_script_update_urls(script, enabled_only=enabled_only, auto=is_auto)
            if urls is None:
                continue
            task = self.registry.get(script.id)
            if task is None:
                task = asyncio.ensure_future(self._check_limited(script, urls, not is_auto))
                self.registry.register(script.id, task)
            else:
                logger.debug(f"Joining in-flight update check of script {script.id}")
            jobs.append(task)

        logger.info(f"Checking {len(jobs)} script(s) for updates ({'auto' if is_auto else 'manual'})")
        results = await asyncio.gather(*jobs, return_exceptions=True)

        outcomes: list[CheckOutcome] = []
        for script_result in results:
            if isinstance(script_result, BaseException):
                logger.error(f"Update check failed unexpectedly: {script_result!r}")
                continue
            outcomes.append(script_result)

        notes = [r for r in outcomes if isinstance(r, CheckNote) and r.text]
        if notes:
            try:
                self.notifier.notify(
                    messages.TITLE_UPDATE_ERRORS if any(n.err for n in notes) else messages.TITLE_UPDATES,
                    "".join(f"* {n.text}\n" for n in notes),
                    [n.script.id for n in notes],
                )
            except Exception as e:
                logger.error(f"Failed to deliver update notification: {e!r}")
        if is_auto:
            self.options.set_option("last_update", started_at)

        updated = sum(1 for r in outcomes if r is True)
        logger.info(f"Update check finished: {updated} updated, {len(notes)} note(s)")
        if self.event_bus is not None:
            self.event_bus.publish(
                UpdateBatchCompleted(checked=len(jobs), updated=updated, notes=len(notes), auto=is_auto)
            )
        return updated

    def _select_scripts(self, ids: Union[ScriptId, Iterable[ScriptId], None]) -> list[Script]:
        if ids is None:
            return self.store.get_scripts()
        scripts = []
        seen: set[ScriptId] = set()
        for script_id in ensure_list(ids):
            if script_id in seen:
                continue
            seen.add(script_id)
            script = self.store.get_script_by_id(script_id)
            if script is None:
                logger.warning(f"Unknown script id: {script_id}")
                continue
            scripts.append(script)
        return scripts
