"""Domain types of the update engine.

Scripts are owned by the store; the engine only reads them. ``UpdateState``
is the live progress record of one check and the ``Outcome`` variants are
what the resolver hands back to the worker.
"""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Union

__all__ = [
    "ScriptId",
    "ScriptMeta",
    "ScriptConfig",
    "ScriptCustom",
    "Script",
    "UpdateUrls",
    "UpdateState",
    "FetchOptions",
    "FetchResult",
    "Content",
    "NoUpdate",
    "Unresolvable",
    "Failure",
    "Outcome",
    "CheckNote",
    "CheckOutcome",
]

ScriptId = Union[int, str]


@dataclass
class ScriptMeta:
    """Values declared in a script's metadata block."""

    name: str = ""
    version: Optional[str] = None
    namespace: str = ""
    download_url: Optional[str] = None
    update_url: Optional[str] = None
    requires: list[str] = field(default_factory=list)
    resources: dict[str, str] = field(default_factory=dict)


@dataclass
class ScriptConfig:
    """Per-script settings chosen by the user."""

    enabled: bool = True
    should_update: bool = True
    notify_updates: Optional[bool] = None
    """None defers to the global notify_updates option."""


@dataclass
class ScriptCustom:
    """User overrides of the URLs declared in the metadata block."""

    download_url: Optional[str] = None
    update_url: Optional[str] = None
    last_install_url: Optional[str] = None


@dataclass
class Script:
    """An installed userscript."""

    id: ScriptId
    meta: ScriptMeta = field(default_factory=ScriptMeta)
    config: ScriptConfig = field(default_factory=ScriptConfig)
    custom: ScriptCustom = field(default_factory=ScriptCustom)
    code: str = ""

    @property
    def display_name(self) -> str:
        return self.meta.name or f"#{self.id}"


class UpdateUrls(NamedTuple):
    """Where to download a script from and where to check for its updates."""

    download_url: Optional[str]
    update_url: Optional[str]


@dataclass
class UpdateState:
    """Live progress of a single update check."""

    message: str = ""
    checking: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class FetchOptions:
    """Request settings passed to the fetcher."""

    no_cache: bool = False
    headers: tuple[tuple[str, str], ...] = ()

    def header_dict(self) -> dict[str, str]:
        headers = dict(self.headers)
        if self.no_cache:
            headers.setdefault("Cache-Control", "no-cache")
            headers.setdefault("Pragma", "no-cache")
        return headers


@dataclass
class FetchResult:
    """Body and validators of a successful request."""

    url: str
    data: str
    status: int = 200
    etag: Optional[str] = None
    last_modified: Optional[str] = None


@dataclass
class Content:
    """A newer version was downloaded."""

    code: str
    state: UpdateState


@dataclass
class NoUpdate:
    """The installed version is current.

    ``not_modified`` is set when the server reported the update URL unchanged.
    """

    state: UpdateState
    not_modified: bool = False


@dataclass
class Unresolvable:
    """A newer version exists but the script has no download URL."""

    version: Optional[str]
    state: UpdateState


@dataclass
class Failure:
    """The check failed; ``state.error`` holds the user-facing description."""

    state: UpdateState


Outcome = Union[Content, NoUpdate, Unresolvable, Failure]


@dataclass
class CheckNote:
    """A message owed to the user about one script."""

    script: Script
    text: str
    err: bool = False


CheckOutcome = Union[bool, CheckNote, None]
