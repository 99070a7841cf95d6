"""Notifier writing update batch results to the log."""

from typing import Iterable

from scriptupd.domain.types import ScriptId
from scriptupd.logger import get_logger

logger = get_logger("notifier")


class LogNotifier:
    """Logs notifications and keeps them for later inspection."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, list[ScriptId]]] = []

    def notify(self, title: str, text: str, script_ids: Iterable[ScriptId]) -> None:
        ids = list(script_ids)
        self.sent.append((title, text, ids))
        logger.info(f"{title} ({len(ids)} script(s)):\n{text.rstrip()}")
