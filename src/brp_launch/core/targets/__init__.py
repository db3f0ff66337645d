"""
Target discovery and resolution.

Modules:
    models: Target and TargetKind
    scanner: Cargo manifest discovery and target extraction
    resolver: Name + path resolution to exactly one Target
"""

from brp_launch.core.targets.models import Target, TargetKind
from brp_launch.core.targets.resolver import (
    Resolution,
    find_and_validate_target,
    find_required_target_with_path,
)
from brp_launch.core.targets.scanner import find_all_targets_by_name, scan_targets

__all__ = [
    # Models
    "Target",
    "TargetKind",
    # Scanner
    "find_all_targets_by_name",
    "scan_targets",
    # Resolver
    "Resolution",
    "find_and_validate_target",
    "find_required_target_with_path",
]
