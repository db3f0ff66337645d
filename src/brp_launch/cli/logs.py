"""
brp-launch CLI - logs command.

Lists the per-instance log files written by launches.
"""

from __future__ import annotations

import json
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from brp_launch.cli.errors import exit_code_for, print_launch_error
from brp_launch.core.errors import LaunchError
from brp_launch.core.services.launch import LaunchService

console = Console()


def list_logs(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output log files as JSON"),
    ] = False,
) -> None:
    """List launch log files, newest first."""
    try:
        service = LaunchService.from_config()
    except LaunchError as e:
        print_launch_error(e, json_output=json_output)
        raise typer.Exit(exit_code_for(e)) from e

    logs = service.list_logs()

    if json_output:
        print(json.dumps([log.model_dump() for log in logs], indent=2))
        return

    if not logs:
        console.print(f"[dim]No launch logs in {service.config.log_dir}[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Log file")
    table.add_column("Size", justify="right")
    table.add_column("Modified", style="dim")
    for log in logs:
        table.add_row(log.path, f"{log.size_bytes} B", log.modified)
    console.print(table)
