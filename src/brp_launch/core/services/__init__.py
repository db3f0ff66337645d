"""
Service layer for brp-launch.

Services are stateless orchestrators that compose domain operations into
clean API surfaces. Any interface (CLI, RPC front-end, tests) calls service
methods instead of reaching into core packages directly.

Design principles:
- Methods accept typed inputs, return typed outputs, raise typed exceptions.
- No Rich, no sys.exit, no print statements; presentation is the caller's job.
- Services are created via factory methods that accept configuration.

Modules:
    launch: LaunchService lists targets and launches apps and examples.
"""

from brp_launch.core.services.launch import LaunchService

__all__ = ["LaunchService"]
