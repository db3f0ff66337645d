"""
Detached process spawning.

Launched targets must outlive the launcher: each child gets its own session
(Unix) or process group (Windows), so a Ctrl+C or exit of the launcher does
not reach it. A daemon thread reaps the child if it exits while the launcher
is still running, so no zombies accumulate.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import IO, Any

from brp_launch.core.errors import ProcessSpawnError

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = sys.platform == "win32"
IS_UNIX = not IS_WINDOWS


def build_child_env(port_env_var: str, port: int | None) -> dict[str, str]:
    """
    Environment for a launched target.

    Copies the launcher's environment and sets port_env_var to the decimal
    port so the target's remote protocol server binds the allocated port.
    """
    env = os.environ.copy()
    if port is not None:
        env[port_env_var] = str(port)
    return env


def _detach_kwargs() -> dict[str, Any]:
    if IS_UNIX:
        # New session: new process group, no controlling terminal
        return {"start_new_session": True}
    return {
        "creationflags": subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP,
    }


def _reap(process: subprocess.Popen[bytes], target_name: str) -> None:
    returncode = process.wait()
    logger.debug(f"'{target_name}' (pid {process.pid}) exited with code {returncode}")


def launch_detached_process(
    command: list[str],
    working_dir: Path,
    log_file: IO[bytes],
    target_name: str,
    env: Mapping[str, str] | None = None,
) -> int:
    """
    Spawn a command detached from the launcher.

    stdout and stderr both go to log_file; stdin is /dev/null. The log
    handle is closed in the launcher once the child holds its own copy.

    Args:
        command: Executable and arguments
        working_dir: Child's working directory
        log_file: Open binary handle for output redirection
        target_name: Used in log and error messages
        env: Child environment (inherits the launcher's when None)

    Returns:
        Process ID of the child

    Raises:
        ProcessSpawnError: If the process can't be started
    """
    try:
        with log_file:
            process = subprocess.Popen(
                command,
                cwd=working_dir,
                env=dict(env) if env is not None else None,
                stdin=subprocess.DEVNULL,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                **_detach_kwargs(),
            )
    except (OSError, ValueError) as e:
        # ValueError: malformed command or environment (e.g. "=" in a variable name)
        raise ProcessSpawnError(
            f"Failed to spawn process for '{target_name}': {e}",
            {
                "target_name": target_name,
                "command": command,
                "working_dir": str(working_dir),
            },
        ) from e

    threading.Thread(
        target=_reap,
        args=(process, target_name),
        name=f"reap-{process.pid}",
        daemon=True,
    ).start()

    logger.debug(f"Launched '{target_name}' with pid {process.pid}: {' '.join(command)}")
    return process.pid


__all__ = [
    "IS_UNIX",
    "IS_WINDOWS",
    "build_child_env",
    "launch_detached_process",
]
