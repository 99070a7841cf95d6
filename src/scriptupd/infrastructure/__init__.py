"""Infrastructure: HTTP fetching, option storage, script storage, notifiers."""

from .http import HttpFetcher
from .notifier import LogNotifier
from .options import OptionsStore
from .store import ScriptRepository

__all__ = ["HttpFetcher", "LogNotifier", "OptionsStore", "ScriptRepository"]
