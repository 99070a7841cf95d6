"""Shared fakes and fixtures for scriptupd tests."""

import asyncio
import os
import tempfile
from typing import Any, Optional

# Keep the log file and options of the test run out of the user's home
os.environ.setdefault("SCRIPTUPD_HOME", tempfile.mkdtemp(prefix="scriptupd-tests-"))

import pytest

from scriptupd.domain.types import (
    FetchOptions,
    FetchResult,
    Script,
    ScriptConfig,
    ScriptCustom,
    ScriptMeta,
)
from scriptupd.errors import FetchError, StorageError
from scriptupd.core.metablock import parse_meta
from scriptupd.infrastructure.options import OptionsStore

UPDATE_URL = "https://scripts.example.com/test.meta.js"
DOWNLOAD_URL = "https://scripts.example.com/test.user.js"


def metablock(version: str, name: str = "Test Script") -> str:
    return f"// ==UserScript==\n// @name {name}\n// @version {version}\n// ==/UserScript==\n"


def full_script(version: str, name: str = "Test Script") -> str:
    return metablock(version, name) + "console.log('hello');\n"


def make_script(
    script_id: Any = 1,
    version: str = "1.0",
    *,
    download_url: Optional[str] = DOWNLOAD_URL,
    update_url: Optional[str] = UPDATE_URL,
    enabled: bool = True,
    should_update: bool = True,
    notify_updates: Optional[bool] = None,
    requires: Optional[list[str]] = None,
) -> Script:
    return Script(
        id=script_id,
        meta=ScriptMeta(
            name=f"Script {script_id}",
            version=version,
            download_url=download_url,
            update_url=update_url,
            requires=list(requires or []),
        ),
        config=ScriptConfig(enabled=enabled, should_update=should_update, notify_updates=notify_updates),
        custom=ScriptCustom(),
        code=full_script(version, f"Script {script_id}"),
    )


class FakeFetcher:
    """NewerFetcher serving canned responses.

    ``responses`` maps a URL to a body, None (not modified), an exception to
    raise, or a list of those consumed one per request.
    """

    def __init__(self, responses: Optional[dict[str, Any]] = None, delay: float = 0.0):
        self.responses = dict(responses or {})
        self.delay = delay
        self.calls: list[tuple[str, str, FetchOptions, bool]] = []
        self.starts: list[float] = []
        self.active = 0
        self.max_active = 0

    def urls(self, kind: str = "newer") -> list[str]:
        return [url for call_kind, url, _, _ in self.calls if call_kind == kind]

    async def request_newer(self, url: str, options: FetchOptions, force: bool = False) -> Optional[FetchResult]:
        self.calls.append(("newer", url, options, force))
        return await self._respond(url)

    async def request(self, url: str, options: FetchOptions) -> FetchResult:
        self.calls.append(("get", url, options, False))
        result = await self._respond(url)
        if result is None:
            raise FetchError(url, 304)
        return result

    async def _respond(self, url: str) -> Optional[FetchResult]:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.starts.append(asyncio.get_running_loop().time())
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if url not in self.responses:
                raise FetchError(url, 404, "Not Found")
            value = self.responses[url]
            if isinstance(value, list):
                value = value.pop(0)
            if isinstance(value, BaseException):
                raise value
            if value is None:
                return None
            return FetchResult(url=url, data=value)
        finally:
            self.active -= 1


class FakeStore:
    """ScriptStore keeping scripts in a dict and recording calls."""

    def __init__(self, scripts: Optional[list[Script]] = None, resource_error: Optional[str] = None):
        self.scripts = {script.id: script for script in scripts or []}
        self.resource_error = resource_error
        self.parsed: list[tuple[Any, str]] = []
        self.resource_calls: list[tuple[Any, FetchOptions]] = []
        self.fail_parse = False

    def get_script_by_id(self, script_id):
        return self.scripts.get(script_id)

    def get_scripts(self):
        return list(self.scripts.values())

    async def parse_script(self, script_id, code):
        self.parsed.append((script_id, code))
        if self.fail_parse:
            raise StorageError("disk full")
        script = self.scripts[script_id]
        script.meta = parse_meta(code).meta
        script.code = code
        return script

    async def fetch_resources(self, script, options):
        self.resource_calls.append((script.id, options))
        return self.resource_error


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, list]] = []

    def notify(self, title, text, script_ids):
        self.sent.append((title, text, list(script_ids)))


@pytest.fixture
def options():
    """In-memory options with notifications on."""
    return OptionsStore(notify_updates=True)


@pytest.fixture
def notifier():
    return RecordingNotifier()
