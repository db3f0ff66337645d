"""
Launch service for building and starting Cargo targets.

This package provides the core logic behind `brp-launch app` and
`brp-launch example`: building the resolved target, allocating sequential
ports, and spawning detached instances with per-instance log files.

Modules:
    models: LaunchParams, LaunchConfig, BuildState, LaunchedInstance, LaunchResult
    build: cargo build invocation and JSON message parsing
    ports: Port range validation and allocation
    logs: Per-instance log files
    process: Detached process spawning
    strategy: App vs example behavior
    launcher: The end-to-end launch flow

Example Usage:
    >>> from brp_launch.core.launch import LaunchConfig, launch_target
    >>> from brp_launch.core.targets import TargetKind
    >>>
    >>> config = LaunchConfig(
    ...     target_name="breakout",
    ...     kind=TargetKind.EXAMPLE,
    ...     profile="release",
    ...     instance_count=2,
    ... )
    >>> result = launch_target(config, ["/path/to/workspace"])
    >>> result.ports
    [15702, 15703]
"""

from brp_launch.core.launch.build import parse_build_output, run_cargo_build
from brp_launch.core.launch.launcher import build_launch_result, launch_target
from brp_launch.core.launch.logs import LogFileInfo, list_log_files
from brp_launch.core.launch.models import (
    BuildState,
    LaunchConfig,
    LaunchedInstance,
    LaunchParams,
    LaunchResult,
)
from brp_launch.core.launch.ports import allocate_ports, validate_port_range
from brp_launch.core.launch.strategy import LaunchStrategy, strategy_for

__all__ = [
    # Launcher
    "launch_target",
    "build_launch_result",
    # Build
    "run_cargo_build",
    "parse_build_output",
    # Ports
    "allocate_ports",
    "validate_port_range",
    # Logs
    "LogFileInfo",
    "list_log_files",
    # Strategy
    "LaunchStrategy",
    "strategy_for",
    # Models
    "BuildState",
    "LaunchConfig",
    "LaunchParams",
    "LaunchResult",
    "LaunchedInstance",
]
