"""
Target resolution with path-based disambiguation.

Picks exactly one Target for a name and kind. The full candidate set is
always scanned first so the caller learns about same-named targets even when
a path hint makes the choice unambiguous.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from brp_launch.core.errors import (
    NoTargetsFoundError,
    PathDisambiguationError,
    TargetNotFoundAtSpecifiedPathError,
)
from brp_launch.core.targets.models import Target, TargetKind
from brp_launch.core.targets.scanner import find_all_targets_by_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of a successful resolution.

    Attributes:
        target: The selected target
        duplicate_paths: Relative paths of every candidate when more than one
            target matched the name, else None
    """

    target: Target
    duplicate_paths: list[str] | None = field(default=None)


def normalize_path_hint(path: str) -> str:
    """
    Normalize a user-supplied path hint for comparison with relative paths.

    Example:
        >>> normalize_path_hint("./games/space/")
        'games/space'
    """
    cleaned = path.strip().replace("\\", "/")
    if not cleaned:
        return ""
    return str(PurePosixPath(cleaned))


def matches_path(target: Target, path: str) -> bool:
    """Whether a path hint names this target's location exactly."""
    hint = normalize_path_hint(path)
    if hint == target.display_path:
        return True
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        try:
            return candidate.resolve() == target.manifest_dir.resolve()
        except OSError:
            return False
    return False


def find_required_target_with_path(
    name: str,
    kind: TargetKind,
    path: str | None,
    candidates: Sequence[Target],
) -> Target:
    """
    Select one target from already-scanned candidates.

    With a path hint the candidate at exactly that path wins; without one the
    candidate set must contain exactly one entry.

    Raises:
        LookupError: If no candidate satisfies the request. The caller maps
            this to the appropriate structured error.
    """
    if path:
        for target in candidates:
            if matches_path(target, path):
                return target
        raise LookupError(f"No {kind.label} '{name}' at path '{path}'")

    if len(candidates) == 1:
        return candidates[0]

    raise LookupError(f"Expected one {kind.label} named '{name}', found {len(candidates)}")


def find_and_validate_target(
    name: str,
    kind: TargetKind,
    path: str | None,
    search_roots: Sequence[Path | str],
    *,
    max_depth: int = 4,
    required_dependency: str | None = "bevy",
) -> Resolution:
    """
    Resolve a target name to exactly one Target.

    Args:
        name: Target name to resolve
        kind: App or example
        path: Optional path hint selecting among same-named targets
        search_roots: Directories to scan
        max_depth: Scanner depth limit
        required_dependency: Scanner dependency filter

    Returns:
        Resolution with the target and, if several matched, all their paths

    Raises:
        NoTargetsFoundError: No candidate exists
        TargetNotFoundAtSpecifiedPathError: One candidate, hint doesn't match
        PathDisambiguationError: Several candidates, no matching hint
    """
    candidates = find_all_targets_by_name(
        name,
        kind,
        search_roots,
        max_depth=max_depth,
        required_dependency=required_dependency,
    )
    candidate_paths = [target.display_path for target in candidates]
    duplicate_paths = candidate_paths if len(candidates) > 1 else None

    if duplicate_paths:
        logger.debug(f"Found {len(candidates)} {kind.label}s named '{name}': {duplicate_paths}")

    try:
        target = find_required_target_with_path(name, kind, path, candidates)
    except LookupError as e:
        logger.debug(f"Resolution failed: {e}")
        if duplicate_paths:
            raise PathDisambiguationError(duplicate_paths, name, kind.label) from e
        if not candidates:
            raise NoTargetsFoundError(name, kind.label) from e
        raise TargetNotFoundAtSpecifiedPathError(name, kind.label, path, candidate_paths) from e

    return Resolution(target=target, duplicate_paths=duplicate_paths)


__all__ = [
    "Resolution",
    "find_and_validate_target",
    "find_required_target_with_path",
    "matches_path",
    "normalize_path_hint",
]
