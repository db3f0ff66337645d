"""
Standardized error handling and exit codes for the brp-launch CLI.

Launch errors are rendered with actionable guidance: resolution errors list
the candidate paths so the user can retry with --path.
"""

from __future__ import annotations

import json
from enum import IntEnum

from rich.console import Console
from rich.markup import escape

from brp_launch.core.errors import (
    BuildError,
    InvalidParametersError,
    LaunchError,
    NoTargetsFoundError,
    PathDisambiguationError,
    PortRangeError,
    StructuredLaunchError,
    TargetNotFoundAtSpecifiedPathError,
)

console = Console(stderr=True)


class ExitCode(IntEnum):
    """Standard exit codes for brp-launch operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Build, spawn, or unexpected failure."""

    USER_ERROR = 2
    """Input error the user can fix (unknown target, ambiguous path, bad ports)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it
    """
    console.print(f"[red]Error:[/red] {escape(problem)}")

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {escape(solution)}")


def exit_code_for(error: LaunchError) -> ExitCode:
    """Exit code for a launch error."""
    if isinstance(error, (StructuredLaunchError, PortRangeError, InvalidParametersError)):
        return ExitCode.USER_ERROR
    return ExitCode.GENERAL_ERROR


def _path_options(paths: list[str]) -> str:
    return "\n".join(f"  --path {path}" for path in paths)


def _location(loc: object) -> str:
    if isinstance(loc, (list, tuple)):
        return ".".join(str(part) for part in loc) or "value"
    return str(loc)


def print_launch_error(error: LaunchError, *, json_output: bool = False) -> None:
    """
    Render a launch error.

    Args:
        error: The error to render
        json_output: Print the error payload as JSON on stdout instead
    """
    if json_output:
        print(json.dumps({"error": error.to_dict()}, indent=2, default=str))
        return

    if isinstance(error, NoTargetsFoundError):
        print_error(
            f"No {error.target_type} named '{error.target_name}' found",
            reason="No Cargo package in the search roots declares it",
            solution=f"brp-launch list --kind {error.target_type}",
        )
    elif isinstance(error, PathDisambiguationError):
        print_error(
            f"Found {len(error.available_paths)} {error.target_type}s "
            f"named '{error.target_name}'",
            reason="Specify which one to launch with one of:\n"
            + _path_options(error.available_paths),
            solution=f"brp-launch {error.target_type} {error.target_name} "
            f"--path {error.available_paths[0]}",
        )
    elif isinstance(error, TargetNotFoundAtSpecifiedPathError):
        where = f"at path '{error.path}'" if error.path else "at the given path"
        print_error(
            f"{error.target_type.capitalize()} '{error.target_name}' not found {where}",
            reason="Available:\n" + _path_options(error.available_paths),
            solution=f"brp-launch {error.target_type} {error.target_name} "
            f"--path {error.available_paths[0]}",
        )
    elif isinstance(error, BuildError):
        print_error(
            error.message.splitlines()[0] if error.message else "Build failed",
            reason=error.stderr.strip() or None,
            solution=f"cd {error.details.get('manifest_dir')} && cargo build",
        )
    elif isinstance(error, InvalidParametersError):
        problems = [
            f"{_location(entry.get('loc', ()))}: {entry.get('msg', 'invalid')}"
            for entry in error.details.get("errors", [])
        ]
        solution = None
        if error.details.get("source") == "config":
            solution = "Check .brp-launch.json, the user config.json and BRP_LAUNCH_* variables"
        print_error(error.message, reason="\n".join(problems) or None, solution=solution)
    else:
        spawned = error.details.get("spawned_pids") or []
        reason = None
        if spawned:
            reason = f"Instances already running (not stopped): {', '.join(map(str, spawned))}"
        print_error(error.message, reason=reason)
