"""Protocols for the collaborators of the update engine.

The engine depends only on these interfaces so storage, HTTP, options and
notification backends can be swapped (or faked in tests).
"""

from typing import Any, Callable, Iterable, Optional, Protocol

from .types import FetchOptions, FetchResult, Script, ScriptId, UpdateState

__all__ = [
    "NewerFetcher",
    "ScriptStore",
    "OptionStore",
    "OptionsHook",
    "Notifier",
    "ProgressCallback",
]

ProgressCallback = Callable[[ScriptId, UpdateState], None]
"""Receives a snapshot of the update state after every change."""

OptionsHook = Callable[[dict[str, Any]], None]
"""Receives the changed options as a name -> new value mapping."""


class NewerFetcher(Protocol):
    """Conditional HTTP fetcher."""

    async def request_newer(
        self, url: str, options: FetchOptions, force: bool = False
    ) -> Optional[FetchResult]:
        """Fetch ``url`` unless the server reports it unchanged.

        Returns:
            The fetched result, or None when the content has not changed since
            the last request (never None when ``force`` is set)

        Raises:
            FetchError: On transport errors or non-success statuses
        """
        ...

    async def request(self, url: str, options: FetchOptions) -> FetchResult:
        """Fetch ``url`` unconditionally.

        Raises:
            FetchError: On transport errors or non-success statuses
        """
        ...


class ScriptStore(Protocol):
    """Storage of installed scripts."""

    def get_script_by_id(self, script_id: ScriptId) -> Optional[Script]:
        ...

    def get_scripts(self) -> list[Script]:
        ...

    async def parse_script(self, script_id: ScriptId, code: str) -> Script:
        """Replace the code of a script and return the updated script.

        Raises:
            StorageError: When the code cannot be parsed or saved
        """
        ...

    async def fetch_resources(self, script: Script, options: FetchOptions) -> Optional[str]:
        """Download the script's required files and resources.

        Returns:
            An error message for the user, or None when everything was fetched
        """
        ...


class OptionStore(Protocol):
    """Key-value store of user options."""

    def get_option(self, name: str) -> Any:
        ...

    def set_option(self, name: str, value: Any) -> None:
        ...

    def hook_options(self, callback: OptionsHook) -> Callable[[], None]:
        """Call ``callback`` on every change; returns a function removing the hook."""
        ...


class Notifier(Protocol):
    """Delivers the aggregated result of an update batch to the user."""

    def notify(self, title: str, text: str, script_ids: Iterable[ScriptId]) -> None:
        ...
