"""Command-line interface for ffiii-tui."""
from __future__ import annotations

import curses
from pathlib import Path

import click
import questionary

from . import program
from .config import LOCAL_CONFIG, Settings, load_settings, write_settings
from .errors import ConfigError, FfiiiError
from .firefly import FireflyClient
from .logger import get_logger, setup_logging
from .ui import App

log = get_logger(__name__)


def handle_error(ctx: click.Context, error: FfiiiError) -> None:
    """Render an error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def start_ui(settings: Settings) -> None:
    client = FireflyClient(settings.api_url, settings.api_key)
    app = App(client, full_view=settings.full_view)
    curses.wrapper(program.run, app)


@click.group(invoke_without_command=True)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Path to the config file (default: ./config.yaml, then ~/.config/ffiii-tui/config.yaml)",
)
@click.option("--debug", is_flag=True, help="Write debug records to the log file")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    envvar="FFIII_TUI_LOG_FILE",
    help="Log file path (overrides FFIII_TUI_LOG_FILE)",
)
@click.pass_context
def cli(ctx, config_path: str | None, debug: bool, log_file: str | None):
    """ffiii-tui - terminal dashboard for Firefly III.

    Runs the dashboard when no command is given.
    """
    setup_logging(debug=debug, file_path=log_file)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if ctx.invoked_subcommand is not None:
        return
    try:
        settings = load_settings(config_path)
    except FfiiiError as e:
        handle_error(ctx, e)
        return
    log.info("starting ui against %s", settings.api_url)
    start_ui(settings)


@cli.command("init-config")
@click.pass_context
def init_config(ctx):
    """Ask for the Firefly III URL and token and write ./config.yaml."""
    target = Path(ctx.obj.get("config_path") or LOCAL_CONFIG)
    if target.exists():
        handle_error(ctx, ConfigError(f"Config file already exists: {target}"))
        return
    api_url = questionary.text("Firefly III API URL:", default="http://localhost/api/v1").ask()
    if not api_url:
        click.echo("Aborted.")
        return
    api_key = questionary.password("Personal access token:").ask()
    if not api_key:
        click.echo("Aborted.")
        return
    try:
        path = write_settings(Settings(api_url=api_url.strip(), api_key=api_key.strip()), target)
    except FfiiiError as e:
        handle_error(ctx, e)
        return
    click.echo(f"Config written to {path}")


def main() -> None:
    """Main entry point for CLI."""
    cli()
