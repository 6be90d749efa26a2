"""
capfilter Test Configuration

Pytest fixtures and configuration for all tests.
"""

import pytest

from capfilter.filters import protocols
from capfilter.filters.attribute import Attribute
from capfilter.filters.protocols import ProtocolTable


SAMPLE_PROTOCOLS = """\
# Internet (IP) protocols
ip\t0\tIP\t\t# internet protocol, pseudo protocol number
icmp\t1\tICMP\t\t# internet control message protocol
igmp\t2\tIGMP\t\t# internet group management protocol
tcp\t6\tTCP\t\t# transmission control protocol
udp\t17\tUDP\t\t# user datagram protocol
ipv6-icmp\t58\tIPv6-ICMP\t# ICMP for IPv6
ospf\t89\tOSPFIGP\t\t# Open Shortest Path First IGP
carp\t112\tCARP\t# Common Address Redundancy Protocol

broken line
"""


@pytest.fixture
def protocol_table() -> ProtocolTable:
    """A protocol table built from sample database text."""
    return ProtocolTable.from_lines(SAMPLE_PROTOCOLS.splitlines())


@pytest.fixture(autouse=True)
def default_protocol_table(monkeypatch, protocol_table: ProtocolTable) -> ProtocolTable:
    """Keep tests independent of the host's /etc/protocols."""
    monkeypatch.setattr(protocols, "_default_table", protocol_table)
    return protocol_table


@pytest.fixture
def make_attribute():
    """Factory for compiled attributes."""

    def _make(attr_type, section, match, raw: str | None = None) -> Attribute:
        attr = Attribute(attr_type, section, match)
        if raw is not None:
            attr.set_input(raw)
        return attr

    return _make
