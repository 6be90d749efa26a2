"""
capfilter Filter Attributes

An Attribute is one validated capture criterion: a field type, the VLAN
section it applies to, the operator that combines it with its siblings,
and the pcap-filter fragment compiled from the user's text.
"""

from typing import Any, Callable

import structlog

from capfilter.filters.errors import (
    FilterError,
    InvalidAddress,
    InvalidAttribute,
    InvalidEthertype,
    InvalidMacAddress,
    InvalidPort,
    InvalidVlanTag,
    UnknownProtocol,
)
from capfilter.filters.models import (
    CONJUNCTIVE_MATCHES,
    EXCLUDING_MATCHES,
    MAX_SECTION,
    MIN_SECTION,
    OPTIONAL_MATCHES,
    PRESET_MATCHES,
    REAL_TYPES,
    SECTION_MATCHES,
    SECTION_PRESET,
    TYPE_MATCHES,
    VLAN_ETHERTYPES,
    AttributeType,
    Match,
)
from capfilter.filters.protocols import ProtocolLookup, get_protocol_table
from capfilter.filters.validators import (
    is_ethertype,
    is_ip_address,
    is_mac_address,
    is_port,
    is_subnet,
    subnet_network,
)

logger = structlog.get_logger(__name__)

Section = int | str


# =============================================================================
# Constants
# =============================================================================

MAX_VLAN_TAG = 4095
MAX_PROTOCOL_NUMBER = 255

ETHERTYPE_ALIASES = {
    "ipv4": "ip",
    "ipv6": "ip6",
    "arp": "arp",
}

PROTOCOL_ALIASES = {
    "ping": (
        "(icmp[icmptype] = icmp-echo or icmp[icmptype] = icmp-echoreply"
        " or icmp6[icmp6type] = icmp6-echo or icmp6[icmp6type] = icmp6-echoreply)"
    ),
    # ESP, or NAT-T UDP/4500 that is not an IKE packet (non-ESP marker is zero)
    "ipsec": "(esp or (udp port 4500 and udp[8:4] != 0))",
}

# Byte offsets compared by a partial MAC match: destination, then source
MAC_OFFSETS = (0, 6)
PARTIAL_MAC_LENGTHS = (1, 2, 4)


# =============================================================================
# Per-Type Token Compilers
# =============================================================================


def _is_number(token: str) -> bool:
    return token.isascii() and token.isdigit()


def vlan_tag_offset(section: int) -> int:
    """Byte offset of the VLAN ID field of the tag at the given depth."""
    return 10 + 4 * section


def _compile_vlan(token: str, section: int, protocols: ProtocolLookup | None) -> str:
    if not _is_number(token) or int(token) > MAX_VLAN_TAG:
        raise InvalidVlanTag(token, f"Invalid VLAN tag '{token}': expected 0-{MAX_VLAN_TAG}")

    # Untagged traffic carries no tag
    if section == 0:
        raise InvalidVlanTag(
            token,
            f"VLAN tag '{token}' needs a tagged section (1-{MAX_SECTION}); "
            "section 0 matches untagged traffic",
        )
    return f"ether[{vlan_tag_offset(section)}:2] & 0x0fff = {int(token)}"


def _compile_ethertype(token: str, section: int, protocols: ProtocolLookup | None) -> str:
    alias = ETHERTYPE_ALIASES.get(token.lower())
    if alias:
        return alias

    value = token.lower()
    if not value.startswith("0x"):
        value = f"0x{value}"

    if not is_ethertype(value):
        raise InvalidEthertype(token)

    number = int(value, 16)
    if number in VLAN_ETHERTYPES:
        raise InvalidEthertype(
            token,
            f"Ethertype '{token}' is a VLAN tag; match tagged traffic with a "
            "VLAN section instead",
        )

    return f"ether proto 0x{number:04x}"


def _compile_protocol(token: str, section: int, protocols: ProtocolLookup | None) -> str:
    alias = PROTOCOL_ALIASES.get(token.lower())
    if alias:
        return alias

    if _is_number(token):
        number = int(token)
        if number > MAX_PROTOCOL_NUMBER:
            raise UnknownProtocol(
                token, f"Unknown protocol '{token}': numbers range 0-{MAX_PROTOCOL_NUMBER}"
            )
        return f"proto {number}"

    table = protocols if protocols is not None else get_protocol_table()
    number = table.lookup(token)
    if number is None:
        raise UnknownProtocol(token)
    return f"proto {number}"


def _compile_ipaddress(token: str, section: int, protocols: ProtocolLookup | None) -> str:
    if is_ip_address(token):
        return f"host {token}"
    if is_subnet(token):
        return f"net {subnet_network(token)}"
    raise InvalidAddress(token)


def _compile_macaddress(token: str, section: int, protocols: ProtocolLookup | None) -> str:
    if not is_mac_address(token, partial=True):
        raise InvalidMacAddress(token)

    groups = [g.zfill(2).lower() for g in token.split(":")]

    if len(groups) == 6:
        return f"ether host {':'.join(groups)}"

    if len(groups) not in PARTIAL_MAC_LENGTHS:
        raise InvalidMacAddress(
            token,
            f"Invalid MAC address '{token}': partial addresses need 1, 2 or 4 octets",
        )

    value = "0x" + "".join(groups)
    size = len(groups)
    checks = [f"ether[{offset}:{size}] = {value}" for offset in MAC_OFFSETS]
    return f"({' or '.join(checks)})"


def _compile_port(token: str, section: int, protocols: ProtocolLookup | None) -> str:
    if not is_port(token):
        raise InvalidPort(token)
    return f"port {int(token)}"


TokenCompiler = Callable[[str, int, ProtocolLookup | None], str]

_COMPILERS: dict[AttributeType, TokenCompiler] = {
    AttributeType.VLAN: _compile_vlan,
    AttributeType.ETHERTYPE: _compile_ethertype,
    AttributeType.PROTOCOL: _compile_protocol,
    AttributeType.IPADDRESS: _compile_ipaddress,
    AttributeType.MACADDRESS: _compile_macaddress,
    AttributeType.PORT: _compile_port,
}

# Every real type must know how to compile its tokens
_missing = REAL_TYPES - _COMPILERS.keys()
if _missing:
    raise RuntimeError(f"No token compiler for {sorted(t.value for t in _missing)}")


# =============================================================================
# Normalisation
# =============================================================================


def _parse_type(value: Any) -> AttributeType:
    if isinstance(value, AttributeType):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        for attr_type in AttributeType:
            if key in (attr_type.value, attr_type.name.lower()):
                return attr_type
    raise InvalidAttribute("type", value)


def _parse_section(value: Any) -> Section:
    if isinstance(value, str):
        text = value.strip().lower()
        if text == SECTION_PRESET:
            return SECTION_PRESET
        if _is_number(text):
            value = int(text)
    if isinstance(value, int) and not isinstance(value, bool):
        if MIN_SECTION <= value <= MAX_SECTION:
            return value
    raise InvalidAttribute("section", value)


def _parse_match(value: Any) -> Match:
    if isinstance(value, Match):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        for match in Match:
            if key in (match.value, match.name.lower()):
                return match
    raise InvalidAttribute("operator", value)


# =============================================================================
# Attribute
# =============================================================================


class Attribute:
    """
    One validated capture criterion.

    Construction checks the (section, operator, type) triple and raises
    InvalidAttribute on any illegal combination. The filter fragment is
    compiled by set_input(), after which the attribute is immutable.

    Example:
        attr = Attribute(AttributeType.PORT, 0, Match.OR_ANY_OF)
        attr.set_input("80 443")
        attr.filter_string  # "port 80 or port 443"
    """

    __slots__ = (
        "_type",
        "_section",
        "_operator",
        "_input_string",
        "_filter_string",
        "_exclude",
        "_required",
    )

    def __init__(self, attr_type: AttributeType | str, section: Section, operator: Match | str) -> None:
        attr_type = _parse_type(attr_type)
        section = _parse_section(section)
        operator = _parse_match(operator)

        self._validate_combination(attr_type, section, operator)

        self._type = attr_type
        self._section = section
        self._operator = operator
        self._input_string: str | None = None
        self._filter_string = ""
        self._exclude = operator in EXCLUDING_MATCHES
        self._required = operator not in OPTIONAL_MATCHES

    @classmethod
    def build(
        cls,
        attr_type: AttributeType | str,
        section: Section,
        operator: Match | str,
        raw: str | None = None,
        protocols: ProtocolLookup | None = None,
    ) -> "Attribute | FilterError":
        """
        Construct (and optionally compile) an attribute without raising.

        Returns:
            The Attribute on success, the FilterError describing the problem
            otherwise
        """
        try:
            attr = cls(attr_type, section, operator)
            if raw is not None:
                attr.set_input(raw, protocols=protocols)
        except FilterError as e:
            return e
        return attr

    @staticmethod
    def _validate_combination(attr_type: AttributeType, section: Section, operator: Match) -> None:
        if section == SECTION_PRESET or attr_type == AttributeType.ATTRIBUTE_PRESET:
            if attr_type != AttributeType.ATTRIBUTE_PRESET:
                raise InvalidAttribute(
                    "type", attr_type.value, "Only preset attributes belong to the preset section"
                )
            if section != SECTION_PRESET:
                raise InvalidAttribute(
                    "section", section, "Preset attributes must use the preset section"
                )
            if operator not in PRESET_MATCHES:
                raise InvalidAttribute(
                    "operator", operator.value, f"Invalid preset '{operator.value}'"
                )
            return

        if attr_type == AttributeType.SECTION_MATCH:
            if operator not in SECTION_MATCHES:
                raise InvalidAttribute(
                    "operator", operator.value, f"Invalid section match '{operator.value}'"
                )
            # Untagged traffic can never also satisfy a tagged section
            if operator == Match.ALL_OF and section == 0:
                raise InvalidAttribute(
                    "operator", operator.value, "Section 0 (untagged) cannot use all_of"
                )
            return

        if operator not in TYPE_MATCHES:
            raise InvalidAttribute(
                "operator",
                operator.value,
                f"Invalid operator '{operator.value}' for {attr_type.value}",
            )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def type(self) -> AttributeType:
        return self._type

    @property
    def section(self) -> Section:
        return self._section

    @property
    def operator(self) -> Match:
        return self._operator

    @property
    def input_string(self) -> str:
        return self._input_string or ""

    @property
    def filter_string(self) -> str:
        return self._filter_string

    @property
    def exclude(self) -> bool:
        return self._exclude

    @property
    def required(self) -> bool:
        return self._required

    @property
    def is_preset(self) -> bool:
        return self._section == SECTION_PRESET

    # =========================================================================
    # Compilation
    # =========================================================================

    def set_input(self, raw: str, protocols: ProtocolLookup | None = None) -> None:
        """
        Store the user's text and compile it into a filter fragment.

        Args:
            raw: Whitespace separated tokens
            protocols: Protocol name table (defaults to the system table)

        Raises:
            InvalidInput: If any token is invalid; nothing is stored
            InvalidAttribute: If the input was already set
        """
        if self._input_string is not None:
            raise InvalidAttribute(
                "input", raw, "Attribute input is already set; build a new attribute"
            )

        raw = raw or ""
        tokens = raw.split()

        if not self._type.is_control and tokens:
            filter_string = self._compile_tokens(tokens, protocols)
        else:
            filter_string = ""

        self._input_string = raw
        self._filter_string = filter_string

        logger.debug(
            "attribute_compiled",
            type=self._type.value,
            section=self._section,
            operator=self._operator.value,
            filter=filter_string,
        )

    def _compile_tokens(self, tokens: list[str], protocols: ProtocolLookup | None) -> str:
        compiler = _COMPILERS[self._type]
        fragments = [compiler(token, self._section, protocols) for token in tokens]

        # Exclusion is always a conjunction of negations
        if self._exclude:
            return " and ".join(f"not {f}" for f in fragments)

        joiner = " and " if self._operator in CONJUNCTIVE_MATCHES else " or "
        return joiner.join(fragments)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self._type.value,
            "section": self._section,
            "operator": self._operator.value,
            "input": self.input_string,
            "filter": self._filter_string,
            "exclude": self._exclude,
            "required": self._required,
        }

    def __repr__(self) -> str:
        return (
            f"Attribute(type={self._type.value!r}, section={self._section!r}, "
            f"operator={self._operator.value!r}, filter={self._filter_string!r})"
        )
