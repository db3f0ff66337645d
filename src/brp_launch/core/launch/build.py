"""
Build orchestration.

Runs `cargo build` for a target before launch, blocking until it finishes,
and reads cargo's JSON message stream to tell whether the target was already
fresh or had to be rebuilt.
"""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from brp_launch.core.errors import BuildError, FileOrPathNotFoundError
from brp_launch.core.launch.models import BuildState
from brp_launch.core.targets.models import TargetKind

logger = logging.getLogger(__name__)


def validate_manifest_directory(manifest_path: Path) -> Path:
    """
    Return the directory containing a manifest.

    Raises:
        FileOrPathNotFoundError: If the manifest path has no parent directory
    """
    manifest_dir = manifest_path.parent
    if manifest_path.name == "" or manifest_dir == manifest_path:
        raise FileOrPathNotFoundError(
            "Invalid manifest path",
            {"reason": "No parent directory found", "path": str(manifest_path)},
        )
    return manifest_dir


def build_cargo_command(
    target_name: str,
    kind: TargetKind,
    profile: str,
    features: Sequence[str] | None = None,
    *,
    build_tool: str = "cargo",
) -> list[str]:
    """
    Assemble the build command line.

    Example:
        >>> build_cargo_command("game", TargetKind.APP, "release", ["dev"])
        ['cargo', 'build', '--bin', 'game', '--features', 'dev', '--release', '--message-format=json']
    """
    args = [build_tool, "build", kind.cargo_flag, target_name]

    if features:
        args.extend(["--features", ",".join(features)])

    if profile == "release":
        args.append("--release")

    # JSON output tells us whether the artifact was fresh
    args.append("--message-format=json")
    return args


def execute_build_command(
    args: list[str],
    target_name: str,
    kind: TargetKind,
    profile: str,
    manifest_dir: Path,
) -> subprocess.CompletedProcess[str]:
    """
    Run the build and wait for it to exit.

    Raises:
        BuildError: If the tool can't be started or exits non-zero
    """
    logger.debug(f"Running cargo build for {kind.label} '{target_name}' with args: {args}")

    context = {
        "target_name": target_name,
        "target_type": kind.label,
        "profile": profile,
        "manifest_dir": str(manifest_dir),
    }

    try:
        completed = subprocess.run(
            args,
            cwd=manifest_dir,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as e:
        raise BuildError(
            f"Failed to run cargo build for {kind.label} '{target_name}' "
            f"(profile: {profile}, dir: {manifest_dir}): {e}",
            **context,
        ) from e

    if completed.returncode != 0:
        raise BuildError(
            f"Cargo build failed for {kind.label} '{target_name}' "
            f"(profile: {profile}, dir: {manifest_dir}): {completed.stderr.strip()}",
            stderr=completed.stderr,
            exit_code=completed.returncode,
            **context,
        )

    return completed


def parse_build_output(stdout: str, target_name: str) -> BuildState:
    """
    Derive the build state of a target from cargo's JSON messages.

    Each line is parsed on its own; lines that aren't JSON objects are
    ignored. The first message naming the target decides the outcome.

    Example:
        >>> parse_build_output('{"target": {"name": "game"}, "fresh": true}', "game")
        <BuildState.FRESH: 'fresh'>
    """
    for line in stdout.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(message, dict):
            continue

        target = message.get("target")
        if not isinstance(target, dict) or target.get("name") != target_name:
            continue

        fresh = message.get("fresh")
        if isinstance(fresh, bool) and fresh:
            return BuildState.FRESH
        return BuildState.REBUILT

    return BuildState.NOT_FOUND


def log_build_result(build_state: BuildState, target_name: str, kind: TargetKind) -> None:
    if build_state is BuildState.NOT_FOUND:
        logger.debug(f"Target '{target_name}' not found in build output, assuming it was built")
    elif build_state is BuildState.FRESH:
        logger.debug(f"{kind.label} '{target_name}' was already up to date")
    else:
        logger.info(f"{kind.label} '{target_name}' was built successfully")


def run_cargo_build(
    target_name: str,
    kind: TargetKind,
    profile: str,
    manifest_dir: Path,
    features: Sequence[str] | None = None,
    *,
    build_tool: str = "cargo",
) -> BuildState:
    """
    Build a target and block until compilation completes.

    Args:
        target_name: Binary or example name
        kind: App or example
        profile: "debug" or "release"
        manifest_dir: Directory containing the package's Cargo.toml
        features: Cargo features to enable
        build_tool: Build tool executable

    Returns:
        BuildState describing whether the target was fresh, rebuilt, or not
        observed in the build output

    Raises:
        BuildError: If the build fails
    """
    args = build_cargo_command(target_name, kind, profile, features, build_tool=build_tool)
    completed = execute_build_command(args, target_name, kind, profile, manifest_dir)
    build_state = parse_build_output(completed.stdout, target_name)
    log_build_result(build_state, target_name, kind)
    return build_state


__all__ = [
    "build_cargo_command",
    "execute_build_command",
    "parse_build_output",
    "run_cargo_build",
    "validate_manifest_directory",
]
