"""
Launch service: clean API for discovering and launching targets.

Provides a service layer wrapper around the targets and launch packages so
any interface (CLI, RPC front-end, tests) can list and launch targets
without reaching into core modules.

Usage:
    >>> from brp_launch.core.services.launch import LaunchService
    >>> service = LaunchService.from_config()
    >>>
    >>> # See what's launchable
    >>> for target in service.list_targets():
    ...     print(target.kind, target.name, target.display_path)
    >>>
    >>> # Launch two instances of an example
    >>> result = service.launch_example({"target_name": "breakout", "instance_count": 2})
    >>> result.message
    'Successfully launched 2 instance(s) of breakout on ports 15702-15703'
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from brp_launch.core.config.loader import load_config
from brp_launch.core.config.models import LauncherConfig
from brp_launch.core.errors import InvalidParametersError
from brp_launch.core.launch.launcher import launch_target
from brp_launch.core.launch.logs import LogFileInfo, list_log_files
from brp_launch.core.launch.models import LaunchParams, LaunchResult
from brp_launch.core.targets.models import Target, TargetKind
from brp_launch.core.targets.scanner import scan_targets

logger = logging.getLogger(__name__)


class LaunchService:
    """
    Service for target discovery and launching.

    Example:
        >>> service = LaunchService.from_config()
        >>> result = service.launch_app(LaunchParams(target_name="game", port=20000))
        >>> result.ports
        [20000]
    """

    def __init__(
        self,
        config: LauncherConfig,
        project_dir: Path,
        search_roots: Sequence[Path] | None = None,
    ) -> None:
        """
        Initialize service with dependencies.

        Args:
            config: Launcher configuration
            project_dir: Directory relative search roots are resolved against
            search_roots: Directories to scan; falls back to the configured
                roots, then to project_dir
        """
        self._config = config
        self._project_dir = project_dir
        self._search_roots = list(search_roots) if search_roots else []

    @classmethod
    def from_config(
        cls,
        config: LauncherConfig | None = None,
        search_roots: Sequence[Path] | None = None,
    ) -> LaunchService:
        """
        Create service from configuration.

        Args:
            config: Optional launcher configuration (auto-loaded if None)
            search_roots: Optional explicit search roots

        Raises:
            InvalidParametersError: If the loaded configuration is invalid
        """
        if config is None:
            try:
                config = load_config()
            except ValidationError as e:
                raise InvalidParametersError(
                    f"Invalid brp-launch configuration: {e.error_count()} error(s)",
                    {
                        "source": "config",
                        "errors": e.errors(include_url=False, include_context=False),
                    },
                ) from e

        return cls(config, Path.cwd(), search_roots)

    @property
    def config(self) -> LauncherConfig:
        """The resolved launcher configuration."""
        return self._config

    @property
    def search_roots(self) -> list[Path]:
        """Directories scanned for targets."""
        roots = self._search_roots or [Path(root) for root in self._config.scan.search_roots]
        if not roots:
            return [self._project_dir]
        return [root if root.is_absolute() else self._project_dir / root for root in roots]

    # ============================================================================
    # Discovery
    # ============================================================================

    def list_targets(self, kind: TargetKind | None = None) -> list[Target]:
        """
        List launchable targets in the search roots.

        Args:
            kind: Restrict to apps or examples (both when None)
        """
        targets = scan_targets(
            self.search_roots,
            max_depth=self._config.scan.max_depth,
            required_dependency=self._config.scan.required_dependency,
        )
        if kind is not None:
            targets = [target for target in targets if target.kind is kind]
        return targets

    def list_logs(self) -> list[LogFileInfo]:
        """List launch log files, newest first."""
        return list_log_files(Path(self._config.log_dir))

    # ============================================================================
    # Launch methods
    # ============================================================================

    def launch(
        self, kind: TargetKind, params: LaunchParams | Mapping[str, Any]
    ) -> LaunchResult:
        """
        Launch a target of the given kind.

        Args:
            kind: App or example
            params: LaunchParams, or a raw mapping as received from a client

        Returns:
            LaunchResult describing every started instance

        Raises:
            InvalidParametersError: If params fail validation
            LaunchError: Any failure from resolution, build, or spawn
        """
        launch_params = self._coerce_params(params)
        launch_config = launch_params.to_launch_config(kind, self._config.default_profile)
        logger.info(
            f"Launching {launch_config.instance_count} instance(s) of "
            f"{kind.label} '{launch_config.target_name}' ({launch_config.profile})"
        )
        return launch_target(launch_config, self.search_roots, self._config)

    def launch_app(self, params: LaunchParams | Mapping[str, Any]) -> LaunchResult:
        """Build and launch an application binary."""
        return self.launch(TargetKind.APP, params)

    def launch_example(self, params: LaunchParams | Mapping[str, Any]) -> LaunchResult:
        """Build and launch an example."""
        return self.launch(TargetKind.EXAMPLE, params)

    def _coerce_params(self, params: LaunchParams | Mapping[str, Any]) -> LaunchParams:
        if isinstance(params, LaunchParams):
            return params

        data = dict(params)
        data.setdefault("port", self._config.default_port)
        try:
            return LaunchParams.model_validate(data)
        except ValidationError as e:
            raise InvalidParametersError(
                f"Invalid launch parameters: {e.error_count()} error(s)",
                {"errors": e.errors(include_url=False, include_context=False)},
            ) from e


__all__ = ["LaunchService"]
