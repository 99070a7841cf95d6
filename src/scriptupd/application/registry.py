"""In-flight registry: at most one pending update check per script."""

import asyncio
from typing import Iterator, Optional

from scriptupd.domain.types import CheckOutcome, ScriptId
from scriptupd.logger import get_logger

logger = get_logger("registry")


class InFlightRegistry:
    """Maps script ids to the task checking them.

    Entries are added when a check is launched and removed when it settles,
    either by the worker's cleanup or, for a task cancelled before its worker
    ran, by the task's done callback.
    """

    def __init__(self) -> None:
        self._tasks: dict[ScriptId, "asyncio.Task[CheckOutcome]"] = {}

    def get(self, script_id: ScriptId) -> Optional["asyncio.Task[CheckOutcome]"]:
        return self._tasks.get(script_id)

    def register(self, script_id: ScriptId, task: "asyncio.Task[CheckOutcome]") -> None:
        """
        Track ``task`` as the pending check of ``script_id``.

        Raises:
            ValueError: If another check of this script is still pending
        """
        current = self._tasks.get(script_id)
        if current is not None and current is not task:
            raise ValueError(f"Update check for script {script_id} is already in flight")
        self._tasks[script_id] = task
        task.add_done_callback(lambda done: self._discard(script_id, done))

    def release(self, script_id: ScriptId) -> None:
        """Forget the pending check of ``script_id``; a no-op if there is none."""
        if self._tasks.pop(script_id, None) is not None:
            logger.debug(f"Released in-flight slot of script {script_id}")

    def _discard(self, script_id: ScriptId, task: "asyncio.Task[CheckOutcome]") -> None:
        if self._tasks.get(script_id) is task:
            del self._tasks[script_id]

    def __contains__(self, script_id: object) -> bool:
        return script_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[ScriptId]:
        return iter(list(self._tasks))
