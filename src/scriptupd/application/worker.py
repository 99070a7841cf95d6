"""Update worker: runs the resolver for one script and applies its outcome."""

from typing import Optional

from scriptupd import messages
from scriptupd.domain.protocols import OptionStore, ProgressCallback, ScriptStore
from scriptupd.domain.types import (
    CheckNote,
    CheckOutcome,
    Content,
    Failure,
    FetchOptions,
    NoUpdate,
    Script,
    UpdateState,
    UpdateUrls,
)
from scriptupd.errors import StorageError
from scriptupd.logger import get_logger
from scriptupd.utils import true_join

from .notify import can_notify
from .registry import InFlightRegistry
from .resolver import NO_CACHE, UpdateResolver

logger = get_logger("worker")


class UpdateWorker:
    """Applies the outcome of an update check.

    - New code is handed to the store, then resources are re-fetched bypassing caches
    - A settled check without error (no update, no download URL) re-fetches
      resources normally, unless the server reported the script unchanged
    - A failed check or a failed save skips the resource refresh

    Whatever happens, the script's in-flight registry entry is released.
    """

    def __init__(
        self,
        resolver: UpdateResolver,
        store: ScriptStore,
        options: OptionStore,
        registry: InFlightRegistry,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.resolver = resolver
        self.store = store
        self.options = options
        self.registry = registry
        self.on_progress = on_progress

    async def check(self, script: Script, urls: UpdateUrls, force: bool = False) -> CheckOutcome:
        """
        Check one script and apply the result.

        Args:
            script: The installed script
            urls: Its download and update URLs
            force: Bypass the fetcher's not-modified shortcut

        Returns:
            True when new code was saved, a CheckNote when the user is owed a
            message, otherwise None
        """
        result: CheckOutcome = None
        msg_ok: Optional[str] = None
        msg_err: Optional[str] = None
        resource_options: Optional[FetchOptions] = None
        try:
            outcome = await self.resolver.download_update(script, urls, force)
            if isinstance(outcome, Content):
                updated = await self.store.parse_script(script.id, outcome.code)
                self._publish_settled(script, outcome.state)
                msg_ok = messages.SCRIPT_UPDATED.format(name=updated.display_name)
                resource_options = NO_CACHE
                result = True
            elif isinstance(outcome, Failure):
                msg_err = outcome.state.error
                logger.debug(f"Script {script.id}: {outcome.state.message} {outcome.state.error}")
            elif isinstance(outcome, NoUpdate) and outcome.not_modified:
                logger.debug(f"Script {script.id} not modified, skipping resources")
            elif not outcome.state.error and not outcome.state.checking:
                resource_options = FetchOptions()
        except StorageError as e:
            logger.debug(f"Saving update of script {script.id} failed: {e!r}")
            msg_err = str(e)
        finally:
            try:
                if resource_options is not None:
                    msg_err = await self.store.fetch_resources(script, resource_options)
                    if msg_err:
                        logger.debug(f"Resources of script {script.id}: {msg_err}")
            finally:
                self.registry.release(script.id)

        if (msg_ok or msg_err) and can_notify(script, self.options):
            result = CheckNote(script=script, text=true_join([msg_ok, msg_err]), err=bool(msg_err))
        return result

    def _publish_settled(self, script: Script, state: UpdateState) -> None:
        state.checking = False
        if self.on_progress is not None:
            self.on_progress(script.id, UpdateState(state.message, state.checking, state.error))
