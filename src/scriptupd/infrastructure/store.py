"""Script repository: in-memory storage with optional directory persistence.

A scripts directory holds one ``<id>.user.js`` file per script. Per-script
settings live in an optional ``scripts.json`` beside them::

    {
        "my-script": {"enabled": false, "notify_updates": true,
                      "last_install_url": "https://example.com/my-script.user.js"}
    }
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Optional

from scriptupd import messages
from scriptupd.core.metablock import parse_meta
from scriptupd.domain.protocols import NewerFetcher
from scriptupd.domain.types import FetchOptions, Script, ScriptConfig, ScriptCustom, ScriptId
from scriptupd.errors import FetchError, MetaParseError, StorageError
from scriptupd.logger import get_logger

logger = get_logger("store")

SCRIPT_SUFFIX = ".user.js"
SETTINGS_FILE = "scripts.json"


class ScriptRepository:
    """Implements the ScriptStore protocol.

    Features:
    - Lookup by id and listing in insertion order
    - Replacing a script's code after an update, keeping its settings
    - Downloading ``@require`` and ``@resource`` files through a fetcher
    - Loading from and saving to a scripts directory
    """

    def __init__(self, fetcher: Optional[NewerFetcher] = None, scripts_dir: str | Path | None = None):
        """
        Initialize the repository.

        Args:
            fetcher: Used to download resources; resources are skipped when None
            scripts_dir: Directory to load scripts from and save updates to
        """
        self.fetcher = fetcher
        self.scripts_dir = Path(scripts_dir).expanduser().resolve() if scripts_dir is not None else None
        self._scripts: dict[ScriptId, Script] = {}
        self.resources: dict[str, str] = {}
        """Downloaded resource bodies by URL."""
        if self.scripts_dir is not None:
            self.load_directory()

    def add(self, script: Script) -> Script:
        self._scripts[script.id] = script
        return script

    def get_script_by_id(self, script_id: ScriptId) -> Optional[Script]:
        return self._scripts.get(script_id)

    def get_scripts(self) -> list[Script]:
        return list(self._scripts.values())

    async def parse_script(self, script_id: ScriptId, code: str) -> Script:
        """
        Replace the code and metadata of an installed script.

        Raises:
            StorageError: If the script is unknown, the code has no valid
                metadata block, or it cannot be written to disk
        """
        script = self._scripts.get(script_id)
        if script is None:
            raise StorageError(f"Script {script_id} is not installed")
        try:
            parsed = parse_meta(code)
        except MetaParseError as e:
            raise StorageError(str(e)) from e
        if script.meta.name and parsed.meta.name and parsed.meta.name != script.meta.name:
            logger.info(f"Script {script_id} renamed: {script.meta.name!r} -> {parsed.meta.name!r}")

        if self.scripts_dir is not None:
            self._write_code(script_id, code)
        script.meta = parsed.meta
        script.code = code
        logger.info(f"Saved script {script_id} version {script.meta.version}")
        return script

    async def fetch_resources(self, script: Script, options: FetchOptions) -> Optional[str]:
        """
        Download every ``@require`` and ``@resource`` URL of ``script``.

        Returns:
            A message listing the URLs that failed, or None
        """
        urls = list(dict.fromkeys([*script.meta.requires, *script.meta.resources.values()]))
        if not urls or self.fetcher is None:
            return None
        results = await asyncio.gather(
            *(self.fetcher.request(url, options) for url in urls), return_exceptions=True
        )
        failed = []
        for url, result in zip(urls, results):
            if isinstance(result, FetchError):
                logger.debug(f"Resource {url} of script {script.id} failed: {result}")
                failed.append(url)
            elif isinstance(result, Exception):
                logger.error(f"Unexpected error fetching resource {url} of script {script.id}: {result!r}")
                failed.append(url)
            elif isinstance(result, BaseException):
                raise result
            else:
                self.resources[url] = result.data
        if failed:
            return messages.RESOURCE_ERRORS.format(urls=", ".join(failed))
        return None

    def load_directory(self) -> int:
        """
        Load all scripts of the scripts directory.

        Files without a valid metadata block are skipped.

        Returns:
            Number of scripts loaded
        """
        if self.scripts_dir is None or not self.scripts_dir.is_dir():
            logger.warning(f"Scripts directory not found: {self.scripts_dir}")
            return 0
        settings = self._read_settings()
        count = 0
        for path in sorted(self.scripts_dir.glob(f"*{SCRIPT_SUFFIX}")):
            script_id = path.name[: -len(SCRIPT_SUFFIX)]
            code = path.read_text(encoding="utf-8")
            try:
                parsed = parse_meta(code)
            except MetaParseError as e:
                logger.warning(f"Skipping {path.name}: {e}")
                continue
            entry = settings.get(script_id, {})
            self.add(
                Script(
                    id=script_id,
                    meta=parsed.meta,
                    config=ScriptConfig(
                        enabled=entry.get("enabled", True),
                        should_update=entry.get("should_update", True),
                        notify_updates=entry.get("notify_updates"),
                    ),
                    custom=ScriptCustom(
                        download_url=entry.get("download_url"),
                        update_url=entry.get("update_url"),
                        last_install_url=entry.get("last_install_url"),
                    ),
                    code=code,
                )
            )
            count += 1
        logger.info(f"Loaded {count} script(s) from {self.scripts_dir}")
        return count

    def _read_settings(self) -> dict[str, dict]:
        assert self.scripts_dir is not None
        path = self.scripts_dir / SETTINGS_FILE
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable {path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_code(self, script_id: ScriptId, code: str) -> None:
        assert self.scripts_dir is not None
        path = self.scripts_dir / f"{script_id}{SCRIPT_SUFFIX}"
        temp_path = path.with_name(path.name + ".tmp")
        try:
            temp_path.write_text(code, encoding="utf-8")
            os.replace(temp_path, path)
        except OSError as e:
            raise StorageError(f"Cannot save {path.name}: {e}") from e
