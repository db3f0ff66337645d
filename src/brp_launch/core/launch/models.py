"""
Data models for the launch service.

Defines typed inputs (LaunchParams, LaunchConfig) and outputs (BuildState,
LaunchedInstance, LaunchResult) for building and launching targets.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from brp_launch.core.config.models import DEFAULT_PORT
from brp_launch.core.targets.models import TargetKind

PROFILE_PATTERN = "^(debug|release)$"


class BuildState(str, Enum):
    """State of a target after the build step."""

    NOT_FOUND = "not_found"  # Build succeeded but the target never appeared in its output
    FRESH = "fresh"  # Already up to date
    REBUILT = "rebuilt"  # Compiled during this launch


def _split_features(value: object) -> object:
    """Accept "a,b" as well as ["a", "b"]; drop empty entries."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, (list, tuple)):
        parts = [str(part).strip() for part in value]
        return [part for part in parts if part]
    return value


class LaunchParams(BaseModel):
    """
    Caller-facing launch parameters.

    Numeric strings ("5") are accepted for port and instance_count, since
    some clients serialize every value as a string.
    """

    target_name: str = Field(..., min_length=1, description="Name of the app or example")
    profile: str | None = Field(
        default=None, pattern=PROFILE_PATTERN, description="Build profile (debug or release)"
    )
    path: str | None = Field(
        default=None, description="Path to use when several targets share the name"
    )
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Base port")
    instance_count: int = Field(default=1, ge=1, description="Number of instances to launch")
    features: list[str] | None = Field(
        default=None, description="Cargo features to enable when building and running"
    )

    @field_validator("features", mode="before")
    @classmethod
    def normalize_features(cls, v: object) -> object:
        return _split_features(v)

    def to_launch_config(self, kind: TargetKind, default_profile: str) -> LaunchConfig:
        """Build a LaunchConfig, filling in the default profile."""
        return LaunchConfig(
            target_name=self.target_name,
            kind=kind,
            profile=self.profile or default_profile,
            path=self.path,
            port=self.port,
            instance_count=self.instance_count,
            features=self.features,
        )


class LaunchConfig(BaseModel):
    """
    Resolved launch intent.

    Immutable: multi-instance launches derive one copy per instance with
    with_port() and leave the template untouched.

    Attributes:
        target_name: Name of the target to launch
        kind: App or example
        profile: Build profile ("debug" or "release")
        path: Optional path hint for disambiguation
        port: Port for this instance (base port on the template)
        instance_count: Number of instances to launch
        features: Cargo features to enable
    """

    model_config = ConfigDict(frozen=True)

    target_name: str = Field(..., min_length=1)
    kind: TargetKind
    profile: str = Field(default="debug", pattern=PROFILE_PATTERN)
    path: str | None = None
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    instance_count: int = Field(default=1, ge=1)
    features: tuple[str, ...] | None = None

    @field_validator("features", mode="before")
    @classmethod
    def normalize_features(cls, v: object) -> object:
        return _split_features(v)

    @property
    def is_release(self) -> bool:
        return self.profile == "release"

    def with_port(self, port: int) -> LaunchConfig:
        """Copy of this config bound to a different port."""
        return self.model_copy(update={"port": port})


class LaunchedInstance(BaseModel):
    """A single spawned process."""

    model_config = ConfigDict(frozen=True)

    pid: int
    log_file: str
    port: int


class LaunchResult(BaseModel):
    """
    Result of launching one or more instances of a target.

    Kind-specific fields are None when they don't apply: binary_path is
    only set for apps, package_name only for examples. duplicate_paths is
    set only when several targets shared the name.
    """

    target_name: str
    instances: list[LaunchedInstance]
    working_directory: str | None = None
    profile: str
    binary_path: str | None = None
    package_name: str | None = None
    launch_duration_ms: int
    launch_timestamp: str
    workspace: str | None = None
    duplicate_paths: list[str] | None = None
    message: str

    @property
    def ports(self) -> list[int]:
        return [instance.port for instance in self.instances]

    @property
    def pids(self) -> list[int]:
        return [instance.pid for instance in self.instances]


__all__ = [
    "BuildState",
    "LaunchConfig",
    "LaunchParams",
    "LaunchResult",
    "LaunchedInstance",
]
