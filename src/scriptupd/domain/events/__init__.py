"""Events published by the update engine and the bus that carries them."""

from .bus import EventBus
from .types import Event, ScriptUpdateProgress, UpdateBatchCompleted

__all__ = [
    "EventBus",
    "Event",
    "ScriptUpdateProgress",
    "UpdateBatchCompleted",
]
