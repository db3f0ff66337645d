"""
Error taxonomy for target launching.

Every failure raised while resolving, building, or launching a target is a
LaunchError carrying an ErrorKind and a dict of diagnostic details. The three
resolution errors are StructuredLaunchError subclasses: callers render their
payload as remediation data (e.g. the list of candidate paths) and they are
never re-wrapped into a generic ToolCallError.

Hierarchy:
    LaunchError
    ├── StructuredLaunchError
    │   ├── NoTargetsFoundError
    │   ├── TargetNotFoundAtSpecifiedPathError
    │   └── PathDisambiguationError
    ├── BuildError
    ├── PortRangeError
    ├── ProcessSpawnError
    ├── FileOrPathNotFoundError
    ├── InvalidParametersError
    └── ToolCallError
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Machine-readable classification of a launch failure."""

    NO_TARGETS_FOUND = "no_targets_found"
    TARGET_NOT_FOUND_AT_PATH = "target_not_found_at_specified_path"
    PATH_DISAMBIGUATION = "path_disambiguation"
    BUILD_FAILED = "build_failed"
    PORT_RANGE = "port_range"
    PROCESS_SPAWN = "process_spawn"
    FILE_OR_PATH_NOT_FOUND = "file_or_path_not_found"
    INVALID_PARAMETERS = "invalid_parameters"
    TOOL_CALL_FAILED = "tool_call_failed"


class LaunchError(Exception):
    """Base exception for launch errors."""

    kind: ErrorKind = ErrorKind.TOOL_CALL_FAILED

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details: dict[str, Any] = dict(details or {})
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly payload for callers."""
        return {"kind": self.kind.value, "message": self.message, **self.details}


class StructuredLaunchError(LaunchError):
    """Resolution error whose payload must reach the caller unchanged."""


class NoTargetsFoundError(StructuredLaunchError):
    """No target with the requested name and kind exists in any search root."""

    kind = ErrorKind.NO_TARGETS_FOUND

    def __init__(self, target_name: str, target_type: str) -> None:
        self.target_name = target_name
        self.target_type = target_type
        super().__init__(
            f"No {target_type} named '{target_name}' found in the search roots",
            {"target_name": target_name, "target_type": target_type},
        )


class TargetNotFoundAtSpecifiedPathError(StructuredLaunchError):
    """A single candidate exists but it does not match the given path."""

    kind = ErrorKind.TARGET_NOT_FOUND_AT_PATH

    def __init__(
        self,
        target_name: str,
        target_type: str,
        path: str | None,
        available_paths: list[str],
    ) -> None:
        self.target_name = target_name
        self.target_type = target_type
        self.path = path
        self.available_paths = list(available_paths)
        where = f"at path '{path}'" if path else "without a path"
        super().__init__(
            f"{target_type.capitalize()} '{target_name}' not found {where}. "
            f"Available path(s): {', '.join(self.available_paths)}",
            {
                "target_name": target_name,
                "target_type": target_type,
                "path": path,
                "available_paths": self.available_paths,
            },
        )


class PathDisambiguationError(StructuredLaunchError):
    """Several targets share the name; the caller must pick one by path."""

    kind = ErrorKind.PATH_DISAMBIGUATION

    def __init__(
        self,
        available_paths: list[str],
        target_name: str,
        target_type: str,
    ) -> None:
        self.available_paths = list(available_paths)
        self.target_name = target_name
        self.target_type = target_type
        super().__init__(
            f"Found {len(self.available_paths)} {target_type}s named '{target_name}'. "
            f"Specify a path: {', '.join(self.available_paths)}",
            {
                "target_name": target_name,
                "target_type": target_type,
                "available_paths": self.available_paths,
            },
        )


class BuildError(LaunchError):
    """The build tool could not be run or exited unsuccessfully."""

    kind = ErrorKind.BUILD_FAILED

    def __init__(
        self,
        message: str,
        *,
        target_name: str,
        target_type: str,
        profile: str,
        manifest_dir: str,
        stderr: str = "",
        exit_code: int | None = None,
    ) -> None:
        self.stderr = stderr
        self.exit_code = exit_code
        super().__init__(
            message,
            {
                "target_name": target_name,
                "target_type": target_type,
                "profile": profile,
                "manifest_dir": manifest_dir,
                "exit_code": exit_code,
                "stderr": stderr,
            },
        )


class PortRangeError(LaunchError):
    """Instance count or port range is out of bounds."""

    kind = ErrorKind.PORT_RANGE


class ProcessSpawnError(LaunchError):
    """A launched instance could not be started."""

    kind = ErrorKind.PROCESS_SPAWN


class FileOrPathNotFoundError(LaunchError):
    """A required file or directory is missing or invalid."""

    kind = ErrorKind.FILE_OR_PATH_NOT_FOUND


class InvalidParametersError(LaunchError):
    """Launch parameters failed validation."""

    kind = ErrorKind.INVALID_PARAMETERS


class ToolCallError(LaunchError):
    """Generic failure, with diagnostic context attached in details."""

    kind = ErrorKind.TOOL_CALL_FAILED


__all__ = [
    "ErrorKind",
    "LaunchError",
    "StructuredLaunchError",
    "NoTargetsFoundError",
    "TargetNotFoundAtSpecifiedPathError",
    "PathDisambiguationError",
    "BuildError",
    "PortRangeError",
    "ProcessSpawnError",
    "FileOrPathNotFoundError",
    "InvalidParametersError",
    "ToolCallError",
]
