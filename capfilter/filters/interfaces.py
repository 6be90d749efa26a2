"""
capfilter Interface Capabilities

Loopback, tunnel, encapsulation and logging pseudo interfaces never carry
802.1Q tags, so VLAN sections cannot be expressed on them.
"""

from typing import Iterable

from capfilter.config import settings


def interface_supports_vlan(name: str | None, prefixes: Iterable[str] | None = None) -> bool:
    """
    Check whether a capture interface can filter on VLAN tags.

    Args:
        name: Interface name such as "em0", "lo0" or "ovpns1"
        prefixes: Pseudo interface prefixes (defaults to settings)

    Returns:
        False for pseudo interfaces, True otherwise (including unknown/None)
    """
    if not name:
        return True

    if prefixes is None:
        prefixes = settings.no_vlan_interface_prefixes

    base = name.strip().lower()
    return not any(base.startswith(p.lower()) for p in prefixes)
