"""
Kind-specific launch behavior.

Apps and examples share one orchestration algorithm; the few places where
they differ (how the command is built, what goes into the log header, which
result fields are filled) live in a small strategy object per TargetKind.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from brp_launch.core.launch.models import LaunchConfig
from brp_launch.core.targets.models import Target, TargetKind


class LaunchStrategy(ABC):
    """Behavior that differs between apps and examples."""

    kind: TargetKind

    @abstractmethod
    def build_command(
        self, config: LaunchConfig, target: Target, *, build_tool: str = "cargo"
    ) -> list[str]:
        """Command line that starts one instance."""

    def extra_log_info(self, target: Target) -> str | None:
        """Extra context line written to the log file after its header."""
        return None

    def binary_path(self, config: LaunchConfig, target: Target) -> str | None:
        """Binary path reported in the launch result."""
        return None

    def package_name(self, target: Target) -> str | None:
        """Package name reported in the launch result."""
        return None


class AppLaunchStrategy(LaunchStrategy):
    """Apps run their built binary directly."""

    kind = TargetKind.APP

    def build_command(
        self, config: LaunchConfig, target: Target, *, build_tool: str = "cargo"
    ) -> list[str]:
        return [str(target.binary_path(config.profile))]

    def binary_path(self, config: LaunchConfig, target: Target) -> str | None:
        return str(target.binary_path(config.profile))


class ExampleLaunchStrategy(LaunchStrategy):
    """Examples run through `cargo run --example`."""

    kind = TargetKind.EXAMPLE

    def build_command(
        self, config: LaunchConfig, target: Target, *, build_tool: str = "cargo"
    ) -> list[str]:
        args = [build_tool, "run", "--example", config.target_name]

        if config.features:
            args.extend(["--features", ",".join(config.features)])

        if config.is_release:
            args.append("--release")

        return args

    def extra_log_info(self, target: Target) -> str | None:
        return f"Package: {target.package_name}"

    def package_name(self, target: Target) -> str | None:
        return target.package_name


_STRATEGIES: dict[TargetKind, LaunchStrategy] = {
    TargetKind.APP: AppLaunchStrategy(),
    TargetKind.EXAMPLE: ExampleLaunchStrategy(),
}


def strategy_for(kind: TargetKind) -> LaunchStrategy:
    """Strategy handling a target kind."""
    return _STRATEGIES[kind]


__all__ = [
    "AppLaunchStrategy",
    "ExampleLaunchStrategy",
    "LaunchStrategy",
    "strategy_for",
]
