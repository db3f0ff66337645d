"""
Port allocation for multi-instance launches.

Instance i of a launch listens on base_port + i. The whole range is checked
against the port ceiling before anything is spawned, so a launch never
silently wraps around or collides with port 0.
"""

from __future__ import annotations

from brp_launch.core.config.models import MAX_VALID_PORT
from brp_launch.core.errors import PortRangeError

U16_MAX = 65535


def _saturating_add(a: int, b: int) -> int:
    return min(a + b, U16_MAX)


def validate_port_range(
    base_port: int, instance_count: int, max_valid_port: int = MAX_VALID_PORT
) -> int:
    """
    Check that every port of a launch fits below the ceiling.

    Args:
        base_port: Port of the first instance
        instance_count: Number of instances
        max_valid_port: Highest port an instance may use

    Returns:
        The highest port in the range

    Raises:
        PortRangeError: If instance_count doesn't fit in 16 bits, or the
            range ends above max_valid_port
    """
    if instance_count > U16_MAX:
        raise PortRangeError(
            f"Instance count {instance_count} is too large (maximum is {U16_MAX})",
            {"instance_count": instance_count, "maximum": U16_MAX},
        )

    highest = _saturating_add(base_port, max(instance_count - 1, 0))
    if highest > max_valid_port:
        raise PortRangeError(
            f"Port range {base_port} to {highest} exceeds maximum valid port {max_valid_port}",
            {
                "base_port": base_port,
                "highest_port": highest,
                "max_valid_port": max_valid_port,
                "instance_count": instance_count,
            },
        )
    return highest


def allocate_ports(
    base_port: int, instance_count: int, max_valid_port: int = MAX_VALID_PORT
) -> list[int]:
    """
    Allocate one port per instance.

    Example:
        >>> allocate_ports(15702, 3)
        [15702, 15703, 15704]
    """
    validate_port_range(base_port, instance_count, max_valid_port)
    return [_saturating_add(base_port, i) for i in range(instance_count)]


def format_port_range(ports: list[int]) -> str:
    """
    Human-readable port range: "P" for one port, "P-Q" otherwise.

    Example:
        >>> format_port_range([15702, 15703, 15704])
        '15702-15704'
    """
    if not ports:
        return ""
    if len(ports) == 1:
        return str(ports[0])
    return f"{ports[0]}-{ports[-1]}"


__all__ = [
    "U16_MAX",
    "allocate_ports",
    "format_port_range",
    "validate_port_range",
]
