"""Domain layer: types, events and collaborator protocols."""

from .types import (
    CheckNote,
    CheckOutcome,
    Content,
    Failure,
    FetchOptions,
    FetchResult,
    NoUpdate,
    Outcome,
    Script,
    ScriptConfig,
    ScriptCustom,
    ScriptId,
    ScriptMeta,
    Unresolvable,
    UpdateState,
    UpdateUrls,
)

__all__ = [
    "CheckNote",
    "CheckOutcome",
    "Content",
    "Failure",
    "FetchOptions",
    "FetchResult",
    "NoUpdate",
    "Outcome",
    "Script",
    "ScriptConfig",
    "ScriptCustom",
    "ScriptId",
    "ScriptMeta",
    "Unresolvable",
    "UpdateState",
    "UpdateUrls",
]
