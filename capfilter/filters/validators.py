"""
capfilter Field Validators

Syntax checks for the raw tokens users type into attribute fields.
"""

import ipaddress
import re


_HEX_GROUP = re.compile(r"^[0-9a-fA-F]{1,2}$")
_ETHERTYPE = re.compile(r"^0x[0-9a-fA-F]{1,4}$")
_DIGITS = re.compile(r"^[0-9]+$")

MAX_CIDR = 128


# =============================================================================
# IP Addresses
# =============================================================================


def is_ip_address(value: str) -> bool:
    """Check for a single IPv4 or IPv6 host address."""
    if not value or "/" in value:
        return False
    try:
        ipaddress.ip_address(value)
        return True
    except ValueError:
        return False


def is_subnet(value: str) -> bool:
    """
    Check for an address/prefix pair such as 10.0.0.0/8 or fd00::/64.

    Host bits may be set; the prefix must be 0-128 and fit the family.
    """
    if not value or value.count("/") != 1:
        return False

    address, _, prefix = value.partition("/")
    if not _DIGITS.match(prefix) or int(prefix) > MAX_CIDR:
        return False
    if not is_ip_address(address):
        return False

    try:
        ipaddress.ip_network(value, strict=False)
        return True
    except ValueError:
        return False


def subnet_network(value: str) -> str:
    """
    Normalize a subnet to its network form.

    Args:
        value: Subnet such as 192.168.1.77/24

    Returns:
        Network such as 192.168.1.0/24

    Raises:
        ValueError: If value is not a subnet
    """
    network = ipaddress.ip_network(value, strict=False)
    return f"{network.network_address}/{network.prefixlen}"


# =============================================================================
# Link Layer
# =============================================================================


def is_mac_address(value: str, partial: bool = False) -> bool:
    """
    Check MAC address syntax.

    Args:
        value: Colon separated hex groups, one or two digits each
        partial: Accept a leading subset of the six groups

    Returns:
        True if the value is valid
    """
    if not value:
        return False

    groups = value.split(":")
    if not all(_HEX_GROUP.match(g) for g in groups):
        return False

    if partial:
        return 1 <= len(groups) <= 6
    return len(groups) == 6


def is_ethertype(value: str) -> bool:
    """Check for a 0x-prefixed 16-bit hexadecimal ethertype."""
    return bool(value) and bool(_ETHERTYPE.match(value))


# =============================================================================
# Transport
# =============================================================================


def is_port(value: str) -> bool:
    """Check for a TCP/UDP port number (1-65535)."""
    if not value or not _DIGITS.match(value):
        return False
    return 1 <= int(value) <= 65535
