"""Two-phase update resolution for a single script.

The first request ("fast check") asks the update URL for metadata only. Smart
servers answer with just the metadata block; dumb servers send the whole
script anyway. Only when the fast check shows a newer version and did not
already deliver the code is the download URL fetched.
"""

from dataclasses import replace
from typing import Optional

from scriptupd import messages
from scriptupd.core.metablock import parse_meta, strip_metablock
from scriptupd.core.version import compare_version
from scriptupd.domain.protocols import NewerFetcher, ProgressCallback
from scriptupd.domain.types import (
    Content,
    Failure,
    FetchOptions,
    NoUpdate,
    Outcome,
    Script,
    Unresolvable,
    UpdateState,
    UpdateUrls,
)
from scriptupd.errors import FetchError, MetaParseError
from scriptupd.logger import get_logger

logger = get_logger("resolver")

NO_CACHE = FetchOptions(no_cache=True)
# Smart servers reply to this Accept header with a subset of the metablock and no code
FAST_CHECK = FetchOptions(no_cache=True, headers=(("Accept", "text/x-userscript-meta,*/*"),))


class UpdateResolver:
    """Decides whether a script has an update and downloads it.

    Example:
        >>> resolver = UpdateResolver(fetcher, on_progress=bus_publisher)
        >>> outcome = await resolver.download_update(script, urls, force=True)
        >>> if isinstance(outcome, Content):
        ...     await store.parse_script(script.id, outcome.code)
    """

    def __init__(self, fetcher: NewerFetcher, on_progress: Optional[ProgressCallback] = None):
        """
        Initialize the resolver.

        Args:
            fetcher: Conditional HTTP fetcher
            on_progress: Called with a snapshot of the state after every change
        """
        self.fetcher = fetcher
        self.on_progress = on_progress

    async def download_update(self, script: Script, urls: UpdateUrls, force: bool = False) -> Outcome:
        """
        Check ``script`` for an update and download it when there is one.

        Args:
            script: The installed script
            urls: Its download and update URLs
            force: Bypass the fetcher's not-modified shortcut

        Returns:
            Content with the new code, NoUpdate, Unresolvable or Failure
        """
        download_url, update_url = urls
        state = UpdateState()
        error_message = messages.ERROR_FETCHING_UPDATE_INFO
        self._announce(script, state, messages.CHECKING_FOR_UPDATE)
        try:
            result = await self.fetcher.request_newer(update_url, FAST_CHECK, force)
            if result is None:
                logger.debug(f"Update URL of script {script.id} not modified: {update_url}")
                self._announce(script, state, messages.NO_UPDATE, checking=False)
                return NoUpdate(state, not_modified=True)

            data = result.data
            parsed = parse_meta(data, permissive=True)
            version = parsed.meta.version
            if compare_version(script.meta.version, version) >= 0:
                self._announce(script, state, messages.NO_UPDATE, checking=False)
                return NoUpdate(state)
            if not download_url:
                self._announce(script, state, messages.NEW_VERSION, checking=False)
                return Unresolvable(version, state)
            if download_url == update_url and strip_metablock(data).strip():
                # Code is present, so the fast check response is the entire script
                self._announce(script, state, messages.UPDATED)
                return Content(data, state)

            self._announce(script, state, messages.UPDATING)
            error_message = messages.ERROR_FETCHING_SCRIPT
            if download_url == update_url and parsed.raw.strip() != data.strip():
                return Content(data, state)
            full = await self.fetcher.request_newer(download_url, NO_CACHE, force)
            if full is None:
                raise FetchError(download_url, reason="not modified")
            return Content(full.data, state)
        except Exception as e:
            if isinstance(e, (FetchError, MetaParseError)):
                logger.debug(f"Update check of script {script.id} failed: {e!r}")
            else:
                logger.error(f"Unexpected error checking script {script.id}: {e!r}")
            status = getattr(e, "status", None)
            url = getattr(e, "url", update_url)
            self._announce(
                script,
                state,
                error_message,
                error=f"{messages.GENERIC_ERROR} {status}, {url}",
            )
            return Failure(state)

    def _announce(
        self,
        script: Script,
        state: UpdateState,
        message: str,
        *,
        error: Optional[str] = None,
        checking: Optional[bool] = None,
    ) -> None:
        state.message = message
        state.error = error
        state.checking = not error if checking is None else checking
        if self.on_progress is not None:
            self.on_progress(script.id, replace(state))
