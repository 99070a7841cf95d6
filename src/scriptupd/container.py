"""
UpdateContainer - wires the update engine to its collaborators.

The resolver and worker report progress through the event bus, the checker
and worker share one in-flight registry, and the scheduler drives the checker.
"""

from typing import Optional

from scriptupd.application import (
    AutoUpdateScheduler,
    InFlightRegistry,
    UpdateChecker,
    UpdateResolver,
    UpdateWorker,
)
from scriptupd.config import UpdaterSettings
from scriptupd.domain.events import EventBus, ScriptUpdateProgress
from scriptupd.domain.protocols import NewerFetcher, Notifier, OptionStore, ScriptStore
from scriptupd.domain.types import ScriptId, UpdateState
from scriptupd.infrastructure import HttpFetcher, LogNotifier, OptionsStore, ScriptRepository
from scriptupd.logger import get_logger

logger = get_logger("container")


class UpdateContainer:
    """
    Owns the object graph of one update engine.

    Collaborators not passed in are built from ``settings``: an httpx fetcher,
    a script repository over ``settings.scripts_dir`` and an options store over
    ``settings.options_file``.
    """

    def __init__(
        self,
        settings: Optional[UpdaterSettings] = None,
        *,
        fetcher: Optional[NewerFetcher] = None,
        store: Optional[ScriptStore] = None,
        options: Optional[OptionStore] = None,
        notifier: Optional[Notifier] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.settings = settings or UpdaterSettings()
        self.event_bus = event_bus or EventBus()
        self.fetcher = fetcher or HttpFetcher(
            timeout=self.settings.request_timeout, user_agent=self.settings.user_agent
        )
        self.store = store or ScriptRepository(self.fetcher, self.settings.scripts_dir)
        self.options = options or OptionsStore(self.settings.options_file)
        self.notifier = notifier or LogNotifier()
        self.registry = InFlightRegistry()

        self.resolver = UpdateResolver(self.fetcher, on_progress=self._publish_progress)
        self.worker = UpdateWorker(
            self.resolver, self.store, self.options, self.registry, on_progress=self._publish_progress
        )
        self.checker = UpdateChecker(
            self.store,
            self.options,
            self.worker,
            self.registry,
            self.notifier,
            concurrency=self.settings.concurrency,
            launch_delay=self.settings.launch_delay,
            event_bus=self.event_bus,
        )
        self.scheduler = AutoUpdateScheduler(
            self.checker, self.options, warmup_delay=self.settings.warmup_delay
        )

    def _publish_progress(self, script_id: ScriptId, state: UpdateState) -> None:
        self.event_bus.publish(
            ScriptUpdateProgress(
                script_id=script_id, message=state.message, checking=state.checking, error=state.error
            )
        )

    async def aclose(self) -> None:
        """Stop the scheduler and close the fetcher if this container built it."""
        await self.scheduler.stop()
        if isinstance(self.fetcher, HttpFetcher):
            await self.fetcher.close()
        logger.debug("Update container closed")
