"""
Configuration data models for brp-launch.

These models define the structure of .brp-launch.json and
~/.config/brp-launch/config.json files, with validation and type safety
via Pydantic.
"""

import tempfile
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PORT = 15702
MAX_VALID_PORT = 65534
PORT_ENV_VAR = "BRP_EXTRAS_PORT"


class ScanConfig(BaseModel):
    """
    Target discovery settings.

    Controls how far the catalog scanner walks and which Cargo packages
    count as launchable.
    """
    max_depth: int = Field(
        default=4,
        ge=0,
        description="Maximum directory depth searched below each root for Cargo.toml"
    )
    required_dependency: Optional[str] = Field(
        default="bevy",
        description="Dependency a package must declare to be launchable (null disables)"
    )
    search_roots: list[str] = Field(
        default_factory=list,
        description="Default search roots (current directory when empty)"
    )


class LauncherConfig(BaseModel):
    """
    Top-level brp-launch configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = LauncherConfig(default_port=20000, scan=ScanConfig(max_depth=2))
        >>> config.port_env_var
        'BRP_EXTRAS_PORT'
    """
    default_port: int = Field(
        default=DEFAULT_PORT,
        ge=1,
        le=65535,
        description="Base port used when a launch does not specify one"
    )
    max_valid_port: int = Field(
        default=MAX_VALID_PORT,
        ge=1,
        le=65535,
        description="Highest port any launched instance may bind"
    )
    port_env_var: str = Field(
        default=PORT_ENV_VAR,
        pattern=r"^[A-Za-z_][A-Za-z0-9_]*$",
        description="Environment variable carrying the port to launched processes"
    )
    default_profile: str = Field(
        default="debug",
        pattern="^(debug|release)$",
        description="Build profile used when a launch does not specify one"
    )
    build_tool: str = Field(
        default="cargo",
        min_length=1,
        description="Build tool executable"
    )
    log_dir: str = Field(
        default_factory=tempfile.gettempdir,
        description="Directory for per-instance launch log files"
    )
    scan: ScanConfig = Field(
        default_factory=ScanConfig,
        description="Target discovery settings"
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
        validate_assignment=True,
    )

    @field_validator('scan', mode='before')
    @classmethod
    def validate_scan(cls, v: Union[list, dict, ScanConfig, Any]) -> Union[dict, ScanConfig, Any]:
        """Accept a bare list of search roots as shorthand."""
        if isinstance(v, list):
            return {"search_roots": v}
        return v
