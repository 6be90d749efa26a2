"""
capfilter Filters

Attribute validation and pcap-filter expression compilation.
"""

from capfilter.filters.attribute import Attribute
from capfilter.filters.compiler import ExpressionCompiler, compile_expression
from capfilter.filters.errors import (
    CompileError,
    ExpressionExcludesAllPackets,
    FilterError,
    InvalidAddress,
    InvalidAttribute,
    InvalidEthertype,
    InvalidInput,
    InvalidMacAddress,
    InvalidPort,
    InvalidVlanTag,
    UnknownProtocol,
    UnsupportedVlanFilter,
)
from capfilter.filters.interfaces import interface_supports_vlan
from capfilter.filters.models import SECTION_PRESET, AttributeType, Match
from capfilter.filters.protocols import ProtocolTable, get_protocol_table, lookup_protocol

__all__ = [
    "Attribute",
    "AttributeType",
    "Match",
    "SECTION_PRESET",
    "ExpressionCompiler",
    "compile_expression",
    "ProtocolTable",
    "get_protocol_table",
    "lookup_protocol",
    "interface_supports_vlan",
    "FilterError",
    "InvalidAttribute",
    "InvalidInput",
    "InvalidVlanTag",
    "InvalidEthertype",
    "UnknownProtocol",
    "InvalidAddress",
    "InvalidMacAddress",
    "InvalidPort",
    "CompileError",
    "UnsupportedVlanFilter",
    "ExpressionExcludesAllPackets",
]
