"""Entry point for hb-cli."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from hb_cli import __version__
from hb_cli.commands import templates as template_commands
from hb_cli.commands import twilio as twilio_commands
from hb_cli.commands.auth import login_command, logout_command, session_command
from hb_cli.commands.classify import classify_command, log_command
from hb_cli.commands.messages import health_data_command, messages_command, ping_command
from hb_cli.commands.report import report_command
from hb_cli.commands.summary import summary_command
from hb_cli.core.classify import classification_rules_from_config
from hb_cli.core.config import ConfigError, default_config_path, load_config, low_confidence_threshold
from hb_cli.core.state import CLIState

app = typer.Typer(
    add_completion=False,
    help="Health Buddie command-line interface",
    invoke_without_command=True,
)


def configure_logging(verbose: bool, quiet: bool, plain: bool) -> None:
    """Route package loggers to stderr through rich."""
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    handler = RichHandler(
        console=Console(stderr=True, no_color=plain),
        show_time=False,
        show_path=False,
    )
    package_logger = logging.getLogger("hb_cli")
    package_logger.handlers = [handler]
    package_logger.setLevel(level)


@app.callback()
def main_callback(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON where available"),
    plain_output: bool = typer.Option(
        False,
        "--plain",
        help="Output plain text (no rich formatting/tables)",
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Quiet output"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """Initialize global CLI state."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if json_output and plain_output:
        typer.echo("Options --json and --plain are mutually exclusive.")
        raise typer.Exit(code=2)

    configure_logging(verbose=verbose, quiet=quiet, plain=plain_output)

    cfg_path = (config or default_config_path()).expanduser().resolve()
    try:
        cfg = load_config(cfg_path)
    except ConfigError as exc:
        typer.echo(f"Config error: {exc}")
        raise typer.Exit(code=2)

    console = Console(
        quiet=quiet,
        no_color=plain_output,
        log_time=False,
        log_path=False,
    )
    ctx.obj = CLIState(
        json_output=json_output,
        plain_output=plain_output,
        verbose=verbose,
        quiet=quiet,
        config_path=cfg_path,
        config=cfg,
        console=console,
        rules=classification_rules_from_config(cfg),
        low_confidence_threshold=low_confidence_threshold(cfg),
    )

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


# Top-level commands
app.command("login")(login_command)
app.command("logout")(logout_command)
app.command("session")(session_command)
app.command("classify")(classify_command)
app.command("log")(log_command)
app.command("messages")(messages_command)
app.command("health-data")(health_data_command)
app.command("ping")(ping_command)
app.command("summary")(summary_command)
app.command("report")(report_command)
app.add_typer(template_commands.app, name="templates")
app.add_typer(twilio_commands.app, name="twilio")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
