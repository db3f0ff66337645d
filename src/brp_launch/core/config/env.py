"""
`.env` loading.

Launcher settings come from BRP_LAUNCH_* variables, and launched targets
inherit the launcher's environment, so values from `.env` files reach both.

Files are read in order, later files overriding earlier ones:
    ~/.config/brp-launch/.env < <project>/.env < <project>/.env.local

Variables already exported in the shell are never replaced.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from dotenv import dotenv_values

from .loader import get_xdg_config_home

logger = logging.getLogger(__name__)


def get_user_env_path() -> Path:
    return get_xdg_config_home() / "brp-launch" / ".env"


def get_project_env_paths(project_dir: Path) -> list[Path]:
    return [project_dir / ".env", project_dir / ".env.local"]


def read_env_files(paths: Iterable[Path]) -> dict[str, str]:
    """Merge .env files in order; missing files and valueless keys are skipped."""
    merged: dict[str, str] = {}
    for path in paths:
        if not path.is_file():
            continue
        for key, value in dotenv_values(path).items():
            if value is not None:
                merged[key] = value
    return merged


def load_layered_env(project_dir: Path | None = None) -> dict[str, str]:
    """
    Export user and project .env values into os.environ.

    Args:
        project_dir: Directory holding the project .env files (defaults to cwd)

    Returns:
        The variables that were exported
    """
    if project_dir is None:
        project_dir = Path.cwd()

    values = read_env_files([get_user_env_path(), *get_project_env_paths(project_dir)])
    exported = {key: value for key, value in values.items() if key not in os.environ}
    os.environ.update(exported)

    if exported:
        logger.debug(f"Loaded from .env files: {', '.join(sorted(exported))}")
    return exported


__all__ = [
    "get_project_env_paths",
    "get_user_env_path",
    "load_layered_env",
    "read_env_files",
]
