"""
capfilter Filter Errors

Exception hierarchy for attribute validation and expression compilation.
Every error carries a human-readable message naming the responsible
token, section or attribute field.
"""

from typing import Any


class FilterError(Exception):
    """Base class for all filter errors."""

    error_type = "filter_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"error_type": self.error_type, "message": self.message}


# =============================================================================
# Attribute Construction
# =============================================================================


class InvalidAttribute(FilterError):
    """Bad type/section/operator combination (a caller error)."""

    error_type = "invalid_attribute"

    def __init__(self, field: str, value: Any, message: str | None = None) -> None:
        self.field = field
        self.value = value
        super().__init__(message or f"Invalid attribute {field}: {value!r}")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        data["value"] = str(self.value)
        return data


# =============================================================================
# User Input
# =============================================================================


class InvalidInput(FilterError):
    """End-user text that cannot be compiled."""

    error_type = "invalid_input"
    label = "input"

    def __init__(self, token: str, message: str | None = None) -> None:
        self.token = token
        super().__init__(message or f"Invalid {self.label}: '{token}'")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["token"] = self.token
        return data


class InvalidVlanTag(InvalidInput):
    error_type = "invalid_vlan_tag"
    label = "VLAN tag"


class InvalidEthertype(InvalidInput):
    error_type = "invalid_ethertype"
    label = "ethertype"


class UnknownProtocol(InvalidInput):
    error_type = "unknown_protocol"
    label = "protocol"


class InvalidAddress(InvalidInput):
    error_type = "invalid_address"
    label = "IP address or subnet"


class InvalidMacAddress(InvalidInput):
    error_type = "invalid_mac_address"
    label = "MAC address"


class InvalidPort(InvalidInput):
    error_type = "invalid_port"
    label = "port"


# =============================================================================
# Compilation
# =============================================================================


class CompileError(FilterError):
    """The attribute collection cannot be turned into an expression."""

    error_type = "compile_error"


class UnsupportedVlanFilter(CompileError):
    """VLAN semantics requested on an interface that cannot express them."""

    error_type = "unsupported_vlan_filter"


class ExpressionExcludesAllPackets(CompileError):
    """The inclusions and exclusions leave nothing to capture."""

    error_type = "expression_excludes_all_packets"
