"""Typer-based CLI for checking installed userscripts for updates."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Iterable, List, Optional

import typer

from scriptupd.config import load_settings
from scriptupd.container import UpdateContainer
from scriptupd.domain.events import ScriptUpdateProgress
from scriptupd.domain.types import ScriptId
from scriptupd.logger import get_logger, setup_logger

logger = get_logger("cli")
app = typer.Typer(
    name="scriptupd",
    help="Check installed userscripts for updates and download them",
    add_completion=False,
)

ScriptsDirOption = typer.Option(
    None, "--scripts-dir", "-d", help="Directory of installed *.user.js scripts (env SCRIPTUPD_SCRIPTS_DIR)"
)
OptionsFileOption = typer.Option(None, "--options-file", help="JSON file with update options")
DebugOption = typer.Option(
    os.getenv("DEBUG", "false").lower() == "true", "--debug", help="Log debug output to the console"
)
LogLevelOption = typer.Option(None, "--log-level", help="Log level of the file log (env SCRIPTUPD_LOG_LEVEL)")


class EchoNotifier:
    """Prints the batch notification to the terminal."""

    def notify(self, title: str, text: str, script_ids: Iterable[ScriptId]) -> None:
        typer.secho(title, bold=True)
        typer.echo(text, nl=False)


def _build_container(
    scripts_dir: Optional[Path], options_file: Optional[Path], debug: bool, log_level: Optional[str] = None
) -> UpdateContainer:
    if debug:
        setup_logger(log_level="DEBUG", console_output=True)
    elif log_level:
        setup_logger(log_level=log_level.upper())
    settings = load_settings(scripts_dir=scripts_dir, options_file=options_file)
    if settings.scripts_dir is None:
        typer.echo("❌ No scripts directory; pass --scripts-dir or set SCRIPTUPD_SCRIPTS_DIR.")
        raise typer.Exit(code=2)
    return UpdateContainer(settings, notifier=EchoNotifier())


def _echo_progress(event: ScriptUpdateProgress) -> None:
    line = f"  [{event.script_id}] {event.message}"
    if event.error:
        typer.secho(f"{line} {event.error}", fg=typer.colors.RED)
    else:
        typer.echo(line)


@app.command()
def check(
    ids: Optional[List[str]] = typer.Argument(None, help="Script ids to check; all scripts when omitted"),
    scripts_dir: Optional[Path] = ScriptsDirOption,
    options_file: Optional[Path] = OptionsFileOption,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show per-script progress"),
    debug: bool = DebugOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Check scripts for updates once."""
    container = _build_container(scripts_dir, options_file, debug, log_level)
    if verbose:
        container.event_bus.subscribe(ScriptUpdateProgress, _echo_progress)

    async def runner() -> int:
        try:
            return await container.checker.check_update(ids or None)
        finally:
            await container.aclose()

    updated = asyncio.run(runner())
    typer.echo(f"✅ {updated} script(s) updated.")


@app.command()
def watch(
    scripts_dir: Optional[Path] = ScriptsDirOption,
    options_file: Optional[Path] = OptionsFileOption,
    debug: bool = DebugOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Run automatic update checks until interrupted."""
    container = _build_container(scripts_dir, options_file, debug, log_level)
    container.event_bus.subscribe(ScriptUpdateProgress, _echo_progress)

    async def runner() -> None:
        container.scheduler.start()
        try:
            await asyncio.Event().wait()
        finally:
            await container.aclose()

    try:
        asyncio.run(runner())
    except KeyboardInterrupt:
        typer.echo("\n👋 Stopped.")


@app.command("list")
def list_scripts(
    scripts_dir: Optional[Path] = ScriptsDirOption,
    options_file: Optional[Path] = OptionsFileOption,
    debug: bool = DebugOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """List installed scripts with their versions."""
    container = _build_container(scripts_dir, options_file, debug, log_level)
    scripts = container.store.get_scripts()
    if not scripts:
        typer.echo("No scripts installed.")
    for script in scripts:
        state = "" if script.config.enabled else " (disabled)"
        typer.echo(f"  - {script.id}: {script.display_name} {script.meta.version or '?'}{state}")
    asyncio.run(container.aclose())


def run() -> None:
    """Entry point of the ``scriptupd`` console script."""
    app()
