"""Application layer: resolution protocol, worker, batch checker and scheduler."""

from .checker import UpdateChecker
from .notify import can_notify
from .registry import InFlightRegistry
from .resolver import FAST_CHECK, NO_CACHE, UpdateResolver
from .scheduler import AutoUpdateScheduler
from .worker import UpdateWorker

__all__ = [
    "UpdateChecker",
    "can_notify",
    "InFlightRegistry",
    "FAST_CHECK",
    "NO_CACHE",
    "UpdateResolver",
    "AutoUpdateScheduler",
    "UpdateWorker",
]
