"""
brp-launch CLI - list command.

Shows the apps and examples discovered in the search roots.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from brp_launch.cli.errors import exit_code_for, print_launch_error
from brp_launch.core.errors import LaunchError
from brp_launch.core.services.launch import LaunchService
from brp_launch.core.targets.models import TargetKind

console = Console()


def list_targets(
    kind: Annotated[
        Optional[TargetKind],
        typer.Option("--kind", "-k", help="Only show apps or examples"),
    ] = None,
    root: Annotated[
        Optional[list[Path]],
        typer.Option("--root", "-r", help="Directory to search for targets (repeatable)"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output targets as JSON"),
    ] = False,
) -> None:
    """
    List launchable apps and examples.

    Examples:
        brp-launch list
        brp-launch list --kind example
        brp-launch list -r ../other-workspace --json
    """
    try:
        service = LaunchService.from_config(search_roots=root)
    except LaunchError as e:
        print_launch_error(e, json_output=json_output)
        raise typer.Exit(exit_code_for(e)) from e

    targets = service.list_targets(kind)

    if json_output:
        payload = [
            {
                "name": target.name,
                "kind": target.kind.value,
                "package_name": target.package_name,
                "relative_path": target.display_path,
                "manifest_path": str(target.manifest_path),
                "workspace_root": str(target.workspace_root),
            }
            for target in targets
        ]
        print(json.dumps(payload, indent=2))
        return

    if not targets:
        roots = ", ".join(str(r) for r in service.search_roots)
        console.print(f"[yellow]No launchable targets found in {roots}[/yellow]")
        dependency = service.config.scan.required_dependency
        if dependency:
            console.print(f"[dim]Only packages depending on '{dependency}' are listed[/dim]")
        return

    table = Table(show_header=True, header_style="bold", title="Launchable targets")
    table.add_column("Kind", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Package")
    table.add_column("Path", style="dim")
    for target in targets:
        table.add_row(target.kind.value, target.name, target.package_name, target.display_path)
    console.print(table)
