"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import os
from pathlib import Path
from typing import Any

from .models import LauncherConfig

# Global cache to avoid reloading config multiple times per process
_config_cache: LauncherConfig | None = None


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/brp-launch/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "brp-launch" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .brp-launch.json in the project directory
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".brp-launch.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`.
    Nested dicts are merged, not replaced.

    Example:
        >>> deep_merge({"a": 1, "scan": {"max_depth": 4}}, {"scan": {"max_depth": 2}})
        {'a': 1, 'scan': {'max_depth': 2}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        print(f"Warning: Failed to parse config at {path}: {e}")
        return None


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.

    Supported env vars:
        BRP_LAUNCH_PORT - overrides default_port
        BRP_LAUNCH_PROFILE - overrides default_profile
        BRP_LAUNCH_LOG_DIR - overrides log_dir
        BRP_LAUNCH_BUILD_TOOL - overrides build_tool
        BRP_LAUNCH_REQUIRED_DEPENDENCY - overrides scan.required_dependency
            ("none" or an empty value disables the filter)

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if port_str := os.environ.get("BRP_LAUNCH_PORT"):
        try:
            port = int(port_str)
            if not 1 <= port <= 65535:
                print(f"Warning: BRP_LAUNCH_PORT must be 1-65535, got {port}, ignoring")
            else:
                result["default_port"] = port
        except ValueError:
            print(f"Warning: Invalid BRP_LAUNCH_PORT value '{port_str}', ignoring")

    if profile := os.environ.get("BRP_LAUNCH_PROFILE"):
        if profile in ("debug", "release"):
            result["default_profile"] = profile
        else:
            print(f"Warning: Invalid BRP_LAUNCH_PROFILE value '{profile}', ignoring")

    if log_dir := os.environ.get("BRP_LAUNCH_LOG_DIR"):
        result["log_dir"] = log_dir

    if build_tool := os.environ.get("BRP_LAUNCH_BUILD_TOOL"):
        result["build_tool"] = build_tool

    if "BRP_LAUNCH_REQUIRED_DEPENDENCY" in os.environ:
        dependency = os.environ["BRP_LAUNCH_REQUIRED_DEPENDENCY"].strip()
        scan = dict(result.get("scan") or {})
        scan["required_dependency"] = (
            None if dependency.lower() in ("", "none") else dependency
        )
        result["scan"] = scan

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "default_profile": "debug",
        "build_tool": "cargo",
        "scan": {"max_depth": 4, "required_dependency": "bevy"},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> LauncherConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (BRP_LAUNCH_*)
        2. Project config (.brp-launch.json)
        3. User config (~/.config/brp-launch/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .brp-launch.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated LauncherConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = LauncherConfig(**merged)
    _config_cache = config

    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
