"""
Pytest configuration and shared fixtures.

Provides fixtures that build throwaway Cargo workspaces on disk and a
launcher config that keeps its logs in a temp directory.
"""

from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

from brp_launch.core.config import clear_cache
from brp_launch.core.config.models import LauncherConfig

# ==============================================================================
# Cargo Project Builders
# ==============================================================================


def write_package(
    directory: Path,
    name: str,
    *,
    dependencies: Iterable[str] = ("bevy",),
    dev_dependencies: Iterable[str] = (),
    main: bool = True,
    bins: Iterable[str] = (),
    examples: Iterable[str] = (),
    extra: str = "",
) -> Path:
    """
    Write a Cargo package and return its manifest path.

    Args:
        directory: Package directory (created if needed)
        name: Package name
        dependencies: Crates listed under [dependencies]
        dev_dependencies: Crates listed under [dev-dependencies]
        main: Create src/main.rs (implicit binary named after the package)
        bins: Extra binaries created as src/bin/<name>.rs
        examples: Examples created as examples/<name>.rs
        extra: Raw TOML appended to the manifest
    """
    directory.mkdir(parents=True, exist_ok=True)

    lines = ["[package]", f'name = "{name}"', 'version = "0.1.0"', 'edition = "2021"', ""]
    lines.append("[dependencies]")
    lines.extend(f'{dep} = "0.16"' for dep in dependencies)
    lines.append("")
    if dev_dependencies:
        lines.append("[dev-dependencies]")
        lines.extend(f'{dep} = "0.16"' for dep in dev_dependencies)
        lines.append("")
    if extra:
        lines.append(extra)

    manifest = directory / "Cargo.toml"
    manifest.write_text("\n".join(lines) + "\n")

    if main:
        (directory / "src").mkdir(exist_ok=True)
        (directory / "src" / "main.rs").write_text("fn main() {}\n")
    for bin_name in bins:
        (directory / "src" / "bin").mkdir(parents=True, exist_ok=True)
        (directory / "src" / "bin" / f"{bin_name}.rs").write_text("fn main() {}\n")
    for example in examples:
        (directory / "examples").mkdir(exist_ok=True)
        (directory / "examples" / f"{example}.rs").write_text("fn main() {}\n")

    return manifest


def write_workspace(directory: Path, members: Iterable[str]) -> Path:
    """Write a virtual workspace manifest and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    members_toml = ", ".join(f'"{member}"' for member in members)
    manifest = directory / "Cargo.toml"
    manifest.write_text(f"[workspace]\nmembers = [{members_toml}]\nresolver = \"2\"\n")
    return manifest


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def _reset_config_cache():
    """Never leak a cached config between tests."""
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def package_writer() -> Callable[..., Path]:
    return write_package


@pytest.fixture
def workspace_writer() -> Callable[..., Path]:
    return write_workspace


@pytest.fixture
def game_workspace(tmp_path: Path) -> Path:
    """
    A workspace with two packages.

    Layout:
        workspace/
          Cargo.toml            [workspace]
          game/                 app "game", examples "breakout" and "shared"
          tools/editor/         app "editor", example "shared"
          utils/                no bevy dependency: app "cli"
    """
    root = tmp_path / "workspace"
    write_workspace(root, ["game", "tools/editor", "utils"])
    write_package(root / "game", "game", examples=["breakout", "shared"])
    write_package(root / "tools" / "editor", "editor", examples=["shared"])
    write_package(root / "utils", "cli", dependencies=["serde"])
    return root


@pytest.fixture
def launcher_config(tmp_path: Path) -> LauncherConfig:
    """Default launcher config with logs under tmp_path."""
    return LauncherConfig(log_dir=str(tmp_path / "logs"))
