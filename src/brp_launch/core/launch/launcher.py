"""
Target launcher.

Resolves a target, builds it, and spawns one detached process per instance
on sequential ports:

    resolve -> build (blocking) -> validate port range -> spawn loop -> result

Structured errors raised by any stage reach the caller unchanged; anything
else is wrapped in a ToolCallError carrying the launch context. Instances
are spawned one at a time; if one fails, the remaining instances are not
attempted and those already running are left alone (their pids are listed
on the error).
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, NoReturn

from brp_launch.core.config.models import LauncherConfig
from brp_launch.core.errors import LaunchError, ToolCallError
from brp_launch.core.launch.build import run_cargo_build, validate_manifest_directory
from brp_launch.core.launch.logs import (
    append_to_log_file,
    create_log_file,
    open_log_file_for_redirect,
)
from brp_launch.core.launch.models import (
    BuildState,
    LaunchConfig,
    LaunchedInstance,
    LaunchResult,
)
from brp_launch.core.launch.ports import allocate_ports, format_port_range
from brp_launch.core.launch.process import build_child_env, launch_detached_process
from brp_launch.core.launch.strategy import strategy_for
from brp_launch.core.targets.models import Target
from brp_launch.core.targets.resolver import Resolution, find_and_validate_target

logger = logging.getLogger(__name__)


def create_error_details(
    config: LaunchConfig, duplicate_paths: list[str] | None = None
) -> dict[str, Any]:
    """Common diagnostic context attached to generic launch errors."""
    return {
        "target_name": config.target_name,
        "target_type": config.kind.label,
        "profile": config.profile,
        "path": config.path,
        "port": config.port,
        "duplicate_paths": duplicate_paths,
    }


def wrap_launch_error(
    error: Exception,
    config: LaunchConfig,
    stage: str,
    duplicate_paths: list[str] | None = None,
) -> LaunchError:
    """
    Classify a failure raised by one launch stage.

    LaunchErrors are returned as-is; anything else becomes a ToolCallError
    carrying the launch context plus the original error and its type.
    """
    if isinstance(error, LaunchError):
        return error

    details = create_error_details(config, duplicate_paths)
    details["error"] = str(error)
    details["error_type"] = type(error).__name__
    return ToolCallError(f"{stage} failed: {error}", details)


def handle_target_discovery_error(error: Exception, config: LaunchConfig) -> LaunchError:
    """Classify a failure raised while resolving a target."""
    return wrap_launch_error(error, config, "Target discovery")


def _raise_wrapped(
    error: Exception,
    config: LaunchConfig,
    stage: str,
    duplicate_paths: list[str] | None = None,
) -> NoReturn:
    wrapped = wrap_launch_error(error, config, stage, duplicate_paths)
    if wrapped is error:
        raise error
    raise wrapped from error


def resolve_target(
    config: LaunchConfig, search_roots: Sequence[Path | str], settings: LauncherConfig
) -> Resolution:
    try:
        return find_and_validate_target(
            config.target_name,
            config.kind,
            config.path,
            search_roots,
            max_depth=settings.scan.max_depth,
            required_dependency=settings.scan.required_dependency,
        )
    except Exception as e:
        _raise_wrapped(e, config, "Target discovery")


def ensure_built(config: LaunchConfig, target: Target, settings: LauncherConfig) -> BuildState:
    """Build the target, blocking until compilation completes."""
    manifest_dir = validate_manifest_directory(target.manifest_path)
    return run_cargo_build(
        config.target_name,
        config.kind,
        config.profile,
        manifest_dir,
        config.features,
        build_tool=settings.build_tool,
    )


def launch_instance(
    config: LaunchConfig, target: Target, settings: LauncherConfig
) -> tuple[int, Path]:
    """
    Launch one instance bound to config.port.

    Returns:
        (pid, log file path)

    Raises:
        ToolCallError: If the log file can't be prepared
        ProcessSpawnError: If the process can't be started
    """
    strategy = strategy_for(config.kind)
    manifest_dir = validate_manifest_directory(target.manifest_path)
    command = strategy.build_command(config, target, build_tool=settings.build_tool)

    try:
        log_path = create_log_file(
            Path(settings.log_dir),
            name=config.target_name,
            kind=config.kind.label,
            profile=config.profile,
            port=config.port,
            command=command,
            working_dir=manifest_dir,
            package=target.package_name,
        )
        if extra_info := strategy.extra_log_info(target):
            append_to_log_file(log_path, f"{extra_info}\n")
        log_file = open_log_file_for_redirect(log_path)
    except OSError as e:
        details = create_error_details(config)
        details["log_dir"] = settings.log_dir
        raise ToolCallError(f"Failed to create log file: {e}", details) from e

    env = build_child_env(settings.port_env_var, config.port)
    pid = launch_detached_process(command, manifest_dir, log_file, config.target_name, env)
    return pid, log_path


def launch_instances(
    config: LaunchConfig, target: Target, ports: Sequence[int], settings: LauncherConfig
) -> tuple[list[int], list[Path], list[int]]:
    """
    Launch one instance per port, in order.

    Stops at the first failure without stopping instances already started.
    Whatever the failure, the raised error names the failing port and the
    pids of the instances still running.
    """
    pids: list[int] = []
    log_files: list[Path] = []
    launched_ports: list[int] = []

    for port in ports:
        instance_config = config.with_port(port)
        try:
            pid, log_path = launch_instance(instance_config, target, settings)
        except Exception as e:
            error = wrap_launch_error(e, instance_config, "Instance launch")
            error.details["port"] = port
            error.details["spawned_pids"] = list(pids)
            if pids:
                logger.warning(
                    f"Instance on port {port} failed; {len(pids)} instance(s) "
                    f"already running: {pids}"
                )
            if error is e:
                raise
            raise error from e

        pids.append(pid)
        log_files.append(log_path)
        launched_ports.append(port)

    return pids, log_files, launched_ports


def build_launch_result(
    pids: Sequence[int],
    log_files: Sequence[Path],
    ports: Sequence[int],
    config: LaunchConfig,
    target: Target,
    started_at: float,
    duplicate_paths: list[str] | None = None,
) -> LaunchResult:
    """
    Assemble the result of a successful launch.

    Args:
        pids: Process ID per instance
        log_files: Log file per instance
        ports: Port per instance
        config: Template launch config
        target: Resolved target
        started_at: time.monotonic() value when the launch began
        duplicate_paths: Candidate paths when several targets shared the name
    """
    strategy = strategy_for(config.kind)
    duration_ms = int((time.monotonic() - started_at) * 1000)

    instances = [
        LaunchedInstance(pid=pid, log_file=str(log_file), port=port)
        for pid, log_file, port in zip(pids, log_files, ports)
    ]

    port_range = format_port_range(list(ports))
    message = (
        f"Successfully launched {len(instances)} instance(s) of "
        f"{config.target_name} on ports {port_range}"
    )

    return LaunchResult(
        target_name=config.target_name,
        instances=instances,
        working_directory=os.getcwd(),
        profile=config.profile,
        binary_path=strategy.binary_path(config, target),
        package_name=strategy.package_name(target),
        launch_duration_ms=duration_ms,
        launch_timestamp=datetime.now(timezone.utc).isoformat(),
        workspace=target.workspace_root.name or None,
        duplicate_paths=duplicate_paths,
        message=message,
    )


def launch_target(
    config: LaunchConfig,
    search_roots: Sequence[Path | str],
    settings: LauncherConfig | None = None,
) -> LaunchResult:
    """
    Resolve, build, and launch a target.

    Args:
        config: Launch configuration (port is the base port)
        search_roots: Directories to scan for the target
        settings: Launcher configuration (defaults when None)

    Returns:
        LaunchResult with one entry per instance

    Raises:
        NoTargetsFoundError, TargetNotFoundAtSpecifiedPathError,
        PathDisambiguationError: Target could not be resolved
        BuildError: Build failed
        PortRangeError: Port range is invalid
        ProcessSpawnError: An instance failed to start
        ToolCallError: Any other failure, with context attached

    Example:
        >>> config = LaunchConfig(target_name="game", kind=TargetKind.APP, instance_count=3)
        >>> result = launch_target(config, [Path.cwd()])
        >>> result.message
        'Successfully launched 3 instance(s) of game on ports 15702-15704'
    """
    if settings is None:
        settings = LauncherConfig()

    started_at = time.monotonic()
    logger.debug(f"Environment variable: {settings.port_env_var}={config.port}")

    resolution = resolve_target(config, search_roots, settings)
    target = resolution.target
    duplicate_paths = resolution.duplicate_paths

    try:
        build_state = ensure_built(config, target, settings)
    except Exception as e:
        _raise_wrapped(e, config, "Build", duplicate_paths)

    if build_state is BuildState.FRESH:
        logger.debug("Target was already up to date, launching immediately")
    elif build_state is BuildState.REBUILT:
        logger.debug("Target was rebuilt before launch")
    else:
        logger.warning("Target not found in build output but build succeeded")

    try:
        ports = allocate_ports(config.port, config.instance_count, settings.max_valid_port)
    except Exception as e:
        _raise_wrapped(e, config, "Port allocation", duplicate_paths)

    pids, log_files, launched_ports = launch_instances(config, target, ports, settings)

    try:
        return build_launch_result(
            pids,
            log_files,
            launched_ports,
            config,
            target,
            started_at,
            duplicate_paths,
        )
    except Exception as e:
        # Every instance is already running at this point
        error = wrap_launch_error(e, config, "Launch result", duplicate_paths)
        error.details["spawned_pids"] = list(pids)
        if error is e:
            raise
        raise error from e


__all__ = [
    "build_launch_result",
    "create_error_details",
    "ensure_built",
    "handle_target_discovery_error",
    "launch_instance",
    "launch_instances",
    "launch_target",
    "resolve_target",
    "wrap_launch_error",
]
