"""
Target catalog scanning.

Walks search roots for Cargo manifests and extracts the application binaries
and examples each package declares, following Cargo's target auto-discovery
rules (src/main.rs, src/bin/, examples/) plus explicit [[bin]] and [[example]]
tables.

Scans are never cached: every call reflects the filesystem as it is now.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from brp_launch.core.targets.models import Target, TargetKind

logger = logging.getLogger(__name__)

MANIFEST_NAME = "Cargo.toml"

# Directory names never descended into
SKIP_DIRS = {"target", "node_modules"}


def scan_targets(
    search_roots: Iterable[Path | str],
    *,
    max_depth: int = 4,
    required_dependency: str | None = "bevy",
) -> list[Target]:
    """
    Discover every launchable target below the search roots.

    Args:
        search_roots: Directories to scan
        max_depth: How many directory levels below each root to search
        required_dependency: Only packages declaring this dependency are
            included; None includes every package

    Returns:
        Targets sorted by (kind, name, relative path). A manifest reachable
        from several roots is reported once, relative to the first root.
    """
    targets: list[Target] = []
    seen: set[tuple[Path, TargetKind, str]] = set()
    workspace_cache: dict[Path, Path] = {}

    for raw_root in search_roots:
        root = Path(raw_root).expanduser().resolve()
        if not root.is_dir():
            logger.debug(f"Skipping search root {root}: not a directory")
            continue

        for manifest_path in _find_manifests(root, max_depth):
            data = load_manifest(manifest_path)
            if data is None:
                continue

            for target in _targets_from_manifest(
                manifest_path, data, root, required_dependency, workspace_cache
            ):
                key = (target.manifest_path, target.kind, target.name)
                if key in seen:
                    continue
                seen.add(key)
                targets.append(target)

    targets.sort(key=lambda t: (t.kind.value, t.name, t.display_path))
    logger.debug(f"Discovered {len(targets)} target(s)")
    return targets


def find_all_targets_by_name(
    name: str,
    kind: TargetKind | None,
    search_roots: Iterable[Path | str],
    *,
    max_depth: int = 4,
    required_dependency: str | None = "bevy",
) -> list[Target]:
    """
    Find every target with the given name, optionally restricted to one kind.

    Example:
        >>> find_all_targets_by_name("game", TargetKind.APP, [Path("/work")])
        [Target(name='game', kind=<TargetKind.APP: 'app'>, ...)]
    """
    return [
        target
        for target in scan_targets(
            search_roots, max_depth=max_depth, required_dependency=required_dependency
        )
        if target.name == name and (kind is None or target.kind is kind)
    ]


def load_manifest(manifest_path: Path) -> dict[str, Any] | None:
    """Parse a Cargo.toml, returning None when it can't be read."""
    try:
        return tomllib.loads(manifest_path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as e:
        logger.debug(f"Skipping unreadable manifest {manifest_path}: {e}")
        return None


def find_workspace_root(
    manifest_dir: Path, cache: dict[Path, Path] | None = None
) -> Path:
    """
    Find the Cargo workspace root for a package directory.

    The workspace root is the nearest directory, starting at the package
    itself, whose Cargo.toml has a [workspace] table. A package outside any
    workspace is its own root.
    """
    if cache is not None and manifest_dir in cache:
        return cache[manifest_dir]

    root = manifest_dir
    for candidate in [manifest_dir, *manifest_dir.parents]:
        manifest = candidate / MANIFEST_NAME
        if not manifest.is_file():
            continue
        data = load_manifest(manifest)
        if data is not None and "workspace" in data:
            root = candidate
            break

    if cache is not None:
        cache[manifest_dir] = root
    return root


def declares_dependency(
    data: dict[str, Any], dependency: str, *, include_dev: bool = False
) -> bool:
    """
    Whether a manifest depends on a crate, directly or through a rename.

    Checks [dependencies] (and [dev-dependencies] when include_dev is set),
    including platform-specific [target.'cfg(...)'] tables.
    """
    sections = ["dependencies"]
    if include_dev:
        sections.append("dev-dependencies")

    tables: list[dict[str, Any]] = [data.get(section) or {} for section in sections]
    for platform in (data.get("target") or {}).values():
        if isinstance(platform, dict):
            tables.extend(platform.get(section) or {} for section in sections)

    for table in tables:
        for key, spec in table.items():
            if key == dependency:
                return True
            if isinstance(spec, dict) and spec.get("package") == dependency:
                return True
    return False


def _find_manifests(root: Path, max_depth: int) -> Iterator[Path]:
    """Yield Cargo.toml files at most max_depth levels below root."""
    manifest = root / MANIFEST_NAME
    if manifest.is_file():
        yield manifest

    if max_depth <= 0:
        return

    try:
        children = sorted(root.iterdir())
    except OSError as e:
        logger.debug(f"Cannot list {root}: {e}")
        return

    for child in children:
        if not child.is_dir() or child.is_symlink():
            continue
        if child.name.startswith(".") or child.name in SKIP_DIRS:
            continue
        yield from _find_manifests(child, max_depth - 1)


def _targets_from_manifest(
    manifest_path: Path,
    data: dict[str, Any],
    root: Path,
    required_dependency: str | None,
    workspace_cache: dict[Path, Path],
) -> list[Target]:
    package = data.get("package")
    if not isinstance(package, dict) or not isinstance(package.get("name"), str):
        # Virtual workspace manifest, nothing to launch
        return []

    package_name: str = package["name"]
    manifest_dir = manifest_path.parent

    wants_apps = required_dependency is None or declares_dependency(
        data, required_dependency
    )
    wants_examples = required_dependency is None or declares_dependency(
        data, required_dependency, include_dev=True
    )
    if not (wants_apps or wants_examples):
        return []

    workspace_root = find_workspace_root(manifest_dir, workspace_cache)
    relative_path = _relative_to(manifest_dir, root)

    def make(name: str, kind: TargetKind) -> Target:
        return Target(
            name=name,
            kind=kind,
            manifest_path=manifest_path,
            workspace_root=workspace_root,
            package_name=package_name,
            relative_path=relative_path,
        )

    targets: list[Target] = []
    if wants_apps:
        targets.extend(make(name, TargetKind.APP) for name in _app_names(data, manifest_dir))
    if wants_examples:
        targets.extend(
            make(name, TargetKind.EXAMPLE) for name in _example_names(data, manifest_dir)
        )
    return targets


def _app_names(data: dict[str, Any], manifest_dir: Path) -> list[str]:
    package = data["package"]
    names = _explicit_names(data.get("bin"))

    if package.get("autobins", True):
        if (manifest_dir / "src" / "main.rs").is_file():
            names.append(package["name"])
        names.extend(_discover_sources(manifest_dir / "src" / "bin"))

    return _unique(names)


def _example_names(data: dict[str, Any], manifest_dir: Path) -> list[str]:
    names = _explicit_names(data.get("example"))

    if data["package"].get("autoexamples", True):
        names.extend(_discover_sources(manifest_dir / "examples"))

    return _unique(names)


def _explicit_names(entries: Any) -> list[str]:
    if not isinstance(entries, list):
        return []
    return [
        entry["name"]
        for entry in entries
        if isinstance(entry, dict) and isinstance(entry.get("name"), str)
    ]


def _discover_sources(directory: Path) -> list[str]:
    """Names of single-file (foo.rs) and directory (foo/main.rs) targets."""
    if not directory.is_dir():
        return []

    names: list[str] = []
    for entry in sorted(directory.iterdir()):
        if entry.is_file() and entry.suffix == ".rs":
            names.append(entry.stem)
        elif entry.is_dir() and (entry / "main.rs").is_file():
            names.append(entry.name)
    return names


def _relative_to(path: Path, root: Path) -> Path:
    try:
        return path.relative_to(root)
    except ValueError:
        return path


def _unique(names: list[str]) -> list[str]:
    return list(dict.fromkeys(names))


__all__ = [
    "declares_dependency",
    "find_all_targets_by_name",
    "find_workspace_root",
    "load_manifest",
    "scan_targets",
]
