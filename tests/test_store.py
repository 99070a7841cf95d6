"""Tests for the script repository."""

import json

import pytest

from conftest import FakeFetcher, full_script

from scriptupd import messages
from scriptupd.domain.types import FetchOptions, Script, ScriptMeta
from scriptupd.errors import FetchError, StorageError
from scriptupd.infrastructure.store import ScriptRepository

LIB = "https://cdn.example.com/lib.js"
CSS = "https://cdn.example.com/style.css"


@pytest.fixture
def scripts_dir(tmp_path):
    (tmp_path / "alpha.user.js").write_text(full_script("1.0", "Alpha"))
    (tmp_path / "beta.user.js").write_text(full_script("2.0", "Beta"))
    (tmp_path / "broken.user.js").write_text("console.log('no metadata');")
    (tmp_path / "notes.txt").write_text("ignored")
    (tmp_path / "scripts.json").write_text(
        json.dumps(
            {
                "beta": {
                    "enabled": False,
                    "notify_updates": True,
                    "last_install_url": "https://example.com/beta.user.js",
                }
            }
        )
    )
    return tmp_path


class TestDirectory:
    def test_loads_valid_scripts_with_settings(self, scripts_dir):
        store = ScriptRepository(scripts_dir=scripts_dir)

        assert [s.id for s in store.get_scripts()] == ["alpha", "beta"]
        beta = store.get_script_by_id("beta")
        assert beta.meta.name == "Beta"
        assert beta.meta.version == "2.0"
        assert beta.config.enabled is False
        assert beta.config.notify_updates is True
        assert beta.custom.last_install_url == "https://example.com/beta.user.js"
        assert store.get_script_by_id("broken") is None

    @pytest.mark.asyncio
    async def test_parse_script_writes_file(self, scripts_dir):
        store = ScriptRepository(scripts_dir=scripts_dir)

        script = await store.parse_script("alpha", full_script("1.1", "Alpha"))

        assert script.meta.version == "1.1"
        assert script.code == full_script("1.1", "Alpha")
        assert (scripts_dir / "alpha.user.js").read_text() == full_script("1.1", "Alpha")

    def test_missing_directory(self, tmp_path):
        store = ScriptRepository(scripts_dir=tmp_path / "missing")

        assert store.get_scripts() == []


class TestParseScript:
    @pytest.mark.asyncio
    async def test_keeps_settings(self):
        store = ScriptRepository()
        installed = store.add(Script(id=1, meta=ScriptMeta(name="Test Script", version="1.0")))
        installed.config.enabled = False

        script = await store.parse_script(1, full_script("2.0"))

        assert script is installed
        assert script.meta.version == "2.0"
        assert script.config.enabled is False

    @pytest.mark.asyncio
    async def test_unknown_script(self):
        with pytest.raises(StorageError):
            await ScriptRepository().parse_script(1, full_script("2.0"))

    @pytest.mark.asyncio
    async def test_code_without_metadata(self):
        store = ScriptRepository()
        store.add(Script(id=1))

        with pytest.raises(StorageError):
            await store.parse_script(1, "alert(1)")


class TestFetchResources:
    @pytest.mark.asyncio
    async def test_downloads_requires_and_resources(self):
        fetcher = FakeFetcher({LIB: "lib()", CSS: "body {}"})
        store = ScriptRepository(fetcher)
        script = Script(id=1, meta=ScriptMeta(requires=[LIB], resources={"css": CSS}))

        assert await store.fetch_resources(script, FetchOptions(no_cache=True)) is None
        assert store.resources == {LIB: "lib()", CSS: "body {}"}
        assert all(options.no_cache for _, _, options, _ in fetcher.calls)

    @pytest.mark.asyncio
    async def test_reports_failed_urls(self):
        fetcher = FakeFetcher({LIB: "lib()", CSS: FetchError(CSS, 500)})
        store = ScriptRepository(fetcher)
        script = Script(id=1, meta=ScriptMeta(requires=[LIB], resources={"css": CSS}))

        message = await store.fetch_resources(script, FetchOptions())

        assert message is not None and CSS in message and LIB not in message
        assert store.resources == {LIB: "lib()"}

    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported_like_a_failed_url(self):
        fetcher = FakeFetcher({LIB: "lib()", CSS: RuntimeError("decoder crashed")})
        store = ScriptRepository(fetcher)
        script = Script(id=1, meta=ScriptMeta(requires=[LIB], resources={"css": CSS}))

        message = await store.fetch_resources(script, FetchOptions())

        assert message == messages.RESOURCE_ERRORS.format(urls=CSS)
        assert store.resources == {LIB: "lib()"}

    @pytest.mark.asyncio
    async def test_nothing_to_fetch(self):
        fetcher = FakeFetcher()
        store = ScriptRepository(fetcher)

        assert await store.fetch_resources(Script(id=1), FetchOptions()) is None
        assert fetcher.calls == []
