"""
brp-launch CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console

from brp_launch import __version__
from brp_launch.cli import launch, logs, targets
from brp_launch.core.config.env import load_layered_env

# Help panel names for command grouping
PANEL_LAUNCH = "Launch Targets"
PANEL_INSPECT = "Inspect"

app = typer.Typer(
    name="brp-launch",
    help="Build and launch Cargo apps and examples on sequential BRP ports",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for all commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"brp-launch version {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    brp-launch - build and launch Bevy apps and examples.

    Each instance gets its own port (base port + N) exported as
    BRP_EXTRAS_PORT, runs detached from this process, and logs to its
    own file.

    Quick Start:
        brp-launch list                       # What can I launch?
        brp-launch app my_game                # Build + launch on 15702
        brp-launch example breakout -n 3      # Ports 15702-15704
        brp-launch logs                       # Where did output go?
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()
    setup_logging(debug)
    ctx.obj = {"debug": debug}


app.command(name="app", rich_help_panel=PANEL_LAUNCH)(launch.launch_app)
app.command(name="example", rich_help_panel=PANEL_LAUNCH)(launch.launch_example)
app.command(name="list", rich_help_panel=PANEL_INSPECT)(targets.list_targets)
app.command(name="logs", rich_help_panel=PANEL_INSPECT)(logs.list_logs)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
