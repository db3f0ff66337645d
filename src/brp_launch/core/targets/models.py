"""
Data models for target discovery.

A Target describes one launchable Cargo artifact found on disk: either an
application binary or a runnable example.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class TargetKind(str, Enum):
    """Kind of launchable target."""

    APP = "app"
    EXAMPLE = "example"

    @property
    def cargo_flag(self) -> str:
        """Cargo target selector for this kind (--bin / --example)."""
        return "--bin" if self is TargetKind.APP else "--example"

    @property
    def label(self) -> str:
        return "app" if self is TargetKind.APP else "example"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Target:
    """
    A discovered build target.

    Attributes:
        name: Target name (binary or example name)
        kind: App or example
        manifest_path: Path to the package's Cargo.toml
        workspace_root: Root of the Cargo workspace containing the package
        package_name: Name of the package declaring the target
        relative_path: Manifest directory relative to the search root it was
            found under ("." for the root itself), used for disambiguation
    """

    name: str
    kind: TargetKind
    manifest_path: Path
    workspace_root: Path
    package_name: str
    relative_path: Path

    @property
    def manifest_dir(self) -> Path:
        return self.manifest_path.parent

    @property
    def display_path(self) -> str:
        """Relative path as shown to users, always with forward slashes."""
        return self.relative_path.as_posix()

    def binary_path(self, profile: str) -> Path:
        """
        Location of the built executable for a profile.

        Examples are run through `cargo run`, but the path is still reported
        for completeness.
        """
        suffix = ".exe" if sys.platform == "win32" else ""
        base = self.workspace_root / "target" / profile
        if self.kind is TargetKind.EXAMPLE:
            base = base / "examples"
        return base / f"{self.name}{suffix}"


__all__ = ["Target", "TargetKind"]
