"""
Per-instance launch log files.

Each launched instance writes its combined stdout/stderr to a log file named
from the target kind, package, name, profile and port, so relaunching the
same instance reuses (and resets) the same file. Package and target names are
percent-encoded, so distinct names never share a file.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import IO
from urllib.parse import quote

from pydantic import BaseModel

logger = logging.getLogger(__name__)

LOG_PREFIX = "brp_launch_"
LOG_SUFFIX = ".log"

PACKAGE_SEPARATOR = "@"


class LogFileInfo(BaseModel):
    """A launcher log file found on disk."""

    path: str
    size_bytes: int
    modified: str


def _encode(part: str) -> str:
    # Keeps letters, digits and "_.-~"; "/", "@" and spaces become %XX
    return quote(part, safe="") or "_"


def log_file_name(
    kind: str, name: str, profile: str, port: int, package: str | None = None
) -> str:
    """
    Deterministic log file name for one instance.

    Example:
        >>> log_file_name("example", "3d scene", "debug", 15702, package="demos")
        'brp_launch_example_demos@3d%20scene_debug_port15702.log'
    """
    target = _encode(name)
    if package:
        target = f"{_encode(package)}{PACKAGE_SEPARATOR}{target}"
    return f"{LOG_PREFIX}{kind}_{target}_{profile}_port{port}{LOG_SUFFIX}"


def create_log_file(
    log_dir: Path,
    *,
    name: str,
    kind: str,
    profile: str,
    port: int,
    command: list[str],
    working_dir: Path,
    package: str | None = None,
) -> Path:
    """
    Create (or truncate) an instance's log file and write its header.

    Returns:
        Path of the log file
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / log_file_name(kind, name, profile, port, package)

    started = datetime.now(timezone.utc).isoformat()
    header = (
        f"=== brp-launch {kind} log ===\n"
        f"Target: {name}\n"
        f"Kind: {kind}\n"
        f"Profile: {profile}\n"
        f"Port: {port}\n"
        f"Command: {' '.join(command)}\n"
        f"Working directory: {working_dir}\n"
        f"Started: {started}\n"
        f"{'=' * 40}\n"
    )
    log_path.write_text(header, encoding="utf-8")
    logger.debug(f"Created log file {log_path}")
    return log_path


def append_to_log_file(log_path: Path, text: str) -> None:
    with log_path.open("a", encoding="utf-8") as f:
        f.write(text)


def open_log_file_for_redirect(log_path: Path) -> IO[bytes]:
    """Open the log in append mode for a child's stdout/stderr."""
    return log_path.open("ab")


def list_log_files(log_dir: Path) -> list[LogFileInfo]:
    """
    List launcher log files, newest first.

    Args:
        log_dir: Directory holding the log files

    Returns:
        One LogFileInfo per file; empty if the directory doesn't exist
    """
    if not log_dir.is_dir():
        return []

    entries: list[tuple[float, LogFileInfo]] = []
    for path in log_dir.glob(f"{LOG_PREFIX}*{LOG_SUFFIX}"):
        try:
            stat = path.stat()
        except OSError:
            continue
        modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat()
        entries.append(
            (
                stat.st_mtime,
                LogFileInfo(path=str(path), size_bytes=stat.st_size, modified=modified),
            )
        )

    entries.sort(key=lambda entry: entry[0], reverse=True)
    return [info for _, info in entries]


__all__ = [
    "LogFileInfo",
    "append_to_log_file",
    "create_log_file",
    "list_log_files",
    "log_file_name",
    "open_log_file_for_redirect",
]
