"""Tests for the typer CLI."""

import pytest
from typer.testing import CliRunner

from conftest import full_script

from scriptupd.cli import app

runner = CliRunner()


@pytest.fixture
def scripts_dir(tmp_path):
    (tmp_path / "alpha.user.js").write_text(full_script("1.0", "Alpha"))
    (tmp_path / "beta.user.js").write_text(full_script("2.5", "Beta"))
    (tmp_path / "scripts.json").write_text('{"beta": {"enabled": false}}')
    return tmp_path


@pytest.fixture
def options_file(tmp_path):
    return tmp_path / "state" / "options.json"


class TestCli:
    def test_list(self, scripts_dir, options_file):
        result = runner.invoke(app, ["list", "-d", str(scripts_dir), "--options-file", str(options_file)])

        assert result.exit_code == 0
        assert "alpha: Alpha 1.0" in result.output
        assert "beta: Beta 2.5 (disabled)" in result.output

    def test_check_without_update_urls(self, scripts_dir, options_file):
        result = runner.invoke(
            app, ["check", "alpha", "-d", str(scripts_dir), "--options-file", str(options_file)]
        )

        assert result.exit_code == 0
        assert "0 script(s) updated" in result.output

    def test_missing_scripts_dir(self, monkeypatch, options_file):
        monkeypatch.delenv("SCRIPTUPD_SCRIPTS_DIR", raising=False)

        result = runner.invoke(app, ["list", "--options-file", str(options_file)])

        assert result.exit_code == 2
        assert "No scripts directory" in result.output
