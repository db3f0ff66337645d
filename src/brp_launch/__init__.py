"""
brp-launch - Build and launch Cargo apps and examples

A CLI and library that builds Bevy (or any Cargo) targets and starts one or
more detached instances on sequential Bevy Remote Protocol ports.
"""

__version__ = "0.4.0.dev0"

# Re-export core models for convenience
from brp_launch.core.config.models import LauncherConfig
from brp_launch.core.launch.models import LaunchConfig, LaunchParams, LaunchResult
from brp_launch.core.targets.models import Target, TargetKind

__all__ = [
    "LaunchConfig",
    "LaunchParams",
    "LaunchResult",
    "LauncherConfig",
    "Target",
    "TargetKind",
    "__version__",
]
