"""
brp-launch CLI - app and example commands.

Builds a target and launches one or more instances on sequential ports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from brp_launch.cli.errors import exit_code_for, print_error, print_launch_error
from brp_launch.core.errors import LaunchError
from brp_launch.core.launch.models import LaunchResult
from brp_launch.core.services.launch import LaunchService
from brp_launch.core.targets.models import TargetKind

console = Console()

ProfileOption = Annotated[
    Optional[str],
    typer.Option("--profile", help="Build profile: debug or release (default from config)"),
]
PathOption = Annotated[
    Optional[str],
    typer.Option("--path", help="Relative path selecting among same-named targets"),
]
PortOption = Annotated[
    Optional[int],
    typer.Option("--port", "-p", help="Base port; instance N uses port + N"),
]
InstancesOption = Annotated[
    int,
    typer.Option("--instances", "-n", min=1, help="Number of instances to launch"),
]
FeaturesOption = Annotated[
    Optional[list[str]],
    typer.Option("--features", "-F", help="Cargo features (repeat or comma-separate)"),
]
RootOption = Annotated[
    Optional[list[Path]],
    typer.Option("--root", "-r", help="Directory to search for targets (repeatable)"),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Output result as JSON"),
]


def render_launch_result(result: LaunchResult) -> None:
    """Render a launch result as a summary line and an instance table."""
    console.print(f"[green]✓[/green] {result.message}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("PID", justify="right")
    table.add_column("Port", justify="right")
    table.add_column("Log file", style="dim")
    for instance in result.instances:
        table.add_row(str(instance.pid), str(instance.port), instance.log_file)
    console.print(table)

    details: list[str] = [f"Profile: {result.profile}"]
    if result.binary_path:
        details.append(f"Binary: {result.binary_path}")
    if result.package_name:
        details.append(f"Package: {result.package_name}")
    if result.workspace:
        details.append(f"Workspace: {result.workspace}")
    details.append(f"Took {result.launch_duration_ms} ms")
    console.print(f"[dim]{' | '.join(details)}[/dim]")

    if result.duplicate_paths:
        console.print(
            f"[yellow]Note:[/yellow] {len(result.duplicate_paths)} targets share this name: "
            f"{', '.join(result.duplicate_paths)}"
        )


def _launch(
    kind: TargetKind,
    target_name: str,
    *,
    profile: str | None,
    path: str | None,
    port: int | None,
    instances: int,
    features: list[str] | None,
    roots: list[Path] | None,
    json_output: bool,
) -> None:
    try:
        service = LaunchService.from_config(search_roots=roots)
    except LaunchError as e:
        print_launch_error(e, json_output=json_output)
        raise typer.Exit(exit_code_for(e)) from e

    params: dict[str, object] = {
        "target_name": target_name,
        "instance_count": instances,
        "port": port if port is not None else service.config.default_port,
    }
    if profile:
        params["profile"] = profile
    if path:
        params["path"] = path
    if features:
        params["features"] = ",".join(features)

    try:
        if json_output:
            result = service.launch(kind, params)
        else:
            with console.status(f"[cyan]Building and launching {kind.label} '{target_name}'..."):
                result = service.launch(kind, params)
    except LaunchError as e:
        print_launch_error(e, json_output=json_output)
        raise typer.Exit(exit_code_for(e)) from e
    except KeyboardInterrupt:
        print_error("Launch interrupted", reason="Instances already started keep running")
        raise typer.Exit(130)

    if json_output:
        print(result.model_dump_json(indent=2))
    else:
        render_launch_result(result)


def launch_app(
    target_name: Annotated[str, typer.Argument(help="Name of the app binary to launch")],
    profile: ProfileOption = None,
    path: PathOption = None,
    port: PortOption = None,
    instances: InstancesOption = 1,
    features: FeaturesOption = None,
    root: RootOption = None,
    json_output: JsonOption = False,
) -> None:
    """
    Build and launch an app binary.

    Examples:
        brp-launch app my_game
        brp-launch app my_game --profile release -n 3 --port 20000
        brp-launch app my_game --path crates/game
    """
    _launch(
        TargetKind.APP,
        target_name,
        profile=profile,
        path=path,
        port=port,
        instances=instances,
        features=features,
        roots=root,
        json_output=json_output,
    )


def launch_example(
    target_name: Annotated[str, typer.Argument(help="Name of the example to launch")],
    profile: ProfileOption = None,
    path: PathOption = None,
    port: PortOption = None,
    instances: InstancesOption = 1,
    features: FeaturesOption = None,
    root: RootOption = None,
    json_output: JsonOption = False,
) -> None:
    """
    Build and launch an example via `cargo run --example`.

    Examples:
        brp-launch example breakout
        brp-launch example breakout -F bevy/dynamic_linking --json
    """
    _launch(
        TargetKind.EXAMPLE,
        target_name,
        profile=profile,
        path=path,
        port=port,
        instances=instances,
        features=features,
        roots=root,
        json_output=json_output,
    )
