"""Exception hierarchy for scriptupd.

Collaborators raise these; the resolver and the worker turn them into
outcomes and user-facing notes so that one script never aborts a batch.
"""

from typing import Optional

__all__ = ["ScriptUpdError", "FetchError", "MetaParseError", "StorageError"]


class ScriptUpdError(Exception):
    """Base class for all scriptupd errors."""


class FetchError(ScriptUpdError):
    """A request failed at the transport level or with a non-success status.

    Attributes:
        url: The URL that was requested
        status: HTTP status code, or None when no response was received
    """

    def __init__(self, url: str, status: Optional[int] = None, reason: str = ""):
        self.url = url
        self.status = status
        self.reason = reason
        super().__init__(f"{status} {url}" + (f" ({reason})" if reason else ""))


class MetaParseError(ScriptUpdError):
    """The metadata block of a script is missing or malformed."""


class StorageError(ScriptUpdError):
    """Parsing or persisting a script failed."""
