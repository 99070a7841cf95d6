"""Event types published by the update engine."""

import time
from dataclasses import dataclass, field
from typing import Optional

from ..types import ScriptId


@dataclass
class Event:
    """Base class for all events.

    The timestamp field is set when the event is created.
    """

    timestamp: float = field(default_factory=time.time, init=False)
    """Unix timestamp of the event."""


@dataclass
class ScriptUpdateProgress(Event):
    """Published after every change of a script's update state.

    Lets a live view show "checking..." before the check concludes.
    """

    script_id: ScriptId
    message: str
    checking: bool
    error: Optional[str] = None


@dataclass
class UpdateBatchCompleted(Event):
    """Published when a batch of update checks has finished."""

    checked: int
    """Number of checks awaited (shared in-flight checks included)."""
    updated: int
    """Number of scripts that received new code."""
    notes: int
    """Number of notes delivered to the notifier."""
    auto: bool
