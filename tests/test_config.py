"""Tests for settings loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from scriptupd.config import MAX_TIMER, UpdaterSettings, load_settings


class TestLoadSettings:
    def test_defaults(self, monkeypatch):
        for name in ("CONCURRENCY", "LAUNCH_DELAY", "SCRIPTS_DIR"):
            monkeypatch.delenv(f"SCRIPTUPD_{name}", raising=False)

        settings = load_settings()

        assert settings.concurrency == 2
        assert settings.launch_delay == 0.25
        assert settings.warmup_delay == 20
        assert settings.scripts_dir is None

    def test_environment_and_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SCRIPTUPD_CONCURRENCY", "4")
        monkeypatch.setenv("SCRIPTUPD_SCRIPTS_DIR", "/nowhere")

        settings = load_settings(scripts_dir=tmp_path, launch_delay=None)

        assert settings.concurrency == 4
        assert settings.scripts_dir == Path(tmp_path)
        assert settings.launch_delay == 0.25

    def test_invalid_environment_value(self, monkeypatch):
        monkeypatch.setenv("SCRIPTUPD_CONCURRENCY", "0")

        with pytest.raises(ValidationError):
            load_settings()

    def test_settings_are_frozen(self):
        with pytest.raises(ValidationError):
            UpdaterSettings().concurrency = 5


def test_max_timer_is_signed_32bit_milliseconds():
    assert MAX_TIMER == 2147483.647
