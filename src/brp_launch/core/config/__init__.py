"""
Configuration models and loading.

This module provides Pydantic models for brp-launch configuration
with multi-layer merging: defaults < user < project < env vars.
"""

from .loader import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
)
from .models import (
    DEFAULT_PORT,
    MAX_VALID_PORT,
    PORT_ENV_VAR,
    LauncherConfig,
    ScanConfig,
)

__all__ = [
    # Models
    "LauncherConfig",
    "ScanConfig",
    # Constants
    "DEFAULT_PORT",
    "MAX_VALID_PORT",
    "PORT_ENV_VAR",
    # Loader functions
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
]
