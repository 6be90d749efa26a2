"""
capfilter Filter Models

Shared enumerations and constants for attributes and the expression compiler.
"""

from enum import Enum


# =============================================================================
# Enums
# =============================================================================


class AttributeType(str, Enum):
    """Kinds of criteria an attribute can describe."""

    VLAN = "vlan"
    ETHERTYPE = "ethertype"
    PROTOCOL = "protocol"
    IPADDRESS = "ipaddress"
    MACADDRESS = "macaddress"
    PORT = "port"

    # Control types, they never produce filter syntax of their own
    ATTRIBUTE_PRESET = "attribute_preset"
    SECTION_MATCH = "section_match"

    @property
    def is_control(self) -> bool:
        """Check if this type carries no filter syntax."""
        return self in CONTROL_TYPES


class Match(str, Enum):
    """
    Logical operators.

    The meaning depends on where the operator is used: on a SECTION_MATCH
    attribute it is the disposition of the whole section, on a field
    attribute it combines the input tokens, on a preset it names the preset.
    """

    # Section level
    NONE = "none"

    # Section level and type level (required class)
    ALL_OF = "all_of"
    ANY_OF = "any_of"

    # Type level (required class)
    NONE_OF = "none_of"

    # Type level (optional class)
    OR_ALL_OF = "or_all_of"
    OR_ANY_OF = "or_any_of"
    OR_NONE_OF = "or_none_of"

    # Preset level
    ANY = "any"
    UNTAGGED = "untagged"
    TAGGED = "tagged"
    CUSTOM = "custom"


# =============================================================================
# Constants
# =============================================================================

REAL_TYPES = frozenset({
    AttributeType.VLAN,
    AttributeType.ETHERTYPE,
    AttributeType.PROTOCOL,
    AttributeType.IPADDRESS,
    AttributeType.MACADDRESS,
    AttributeType.PORT,
})

CONTROL_TYPES = frozenset({
    AttributeType.ATTRIBUTE_PRESET,
    AttributeType.SECTION_MATCH,
})

# Sentinel section: ignore everything else and use a named preset
SECTION_PRESET = "preset"

MIN_SECTION = 0
MAX_SECTION = 9

PRESET_MATCHES = frozenset({Match.ANY, Match.UNTAGGED, Match.TAGGED})
SECTION_MATCHES = frozenset({Match.NONE, Match.ALL_OF, Match.ANY_OF})
TYPE_MATCHES = frozenset({
    Match.ALL_OF,
    Match.ANY_OF,
    Match.NONE_OF,
    Match.OR_ALL_OF,
    Match.OR_ANY_OF,
    Match.OR_NONE_OF,
})

# Operators that join tokens with "and" (the rest join with "or")
CONJUNCTIVE_MATCHES = frozenset({Match.ALL_OF, Match.OR_ALL_OF})
EXCLUDING_MATCHES = frozenset({Match.NONE, Match.NONE_OF, Match.OR_NONE_OF})
OPTIONAL_MATCHES = frozenset({Match.OR_ALL_OF, Match.OR_ANY_OF, Match.OR_NONE_OF})

# 802.1Q and 802.1ad tag protocol identifiers
VLAN_ETHERTYPES = frozenset({0x8100, 0x88A8})

# Section 0 "untagged" test that does not advance the VLAN offset
UNTAGGED_WITHOUT_OFFSET = "not ether proto 0x8100 and not ether proto 0x88a8"
