"""
Tests for the protocol table and interface capability checks.
"""

import pytest

from capfilter.filters import protocols
from capfilter.filters.interfaces import interface_supports_vlan
from capfilter.filters.protocols import ProtocolTable, get_protocol_table, lookup_protocol


class TestProtocolTable:
    """Tests for protocol database parsing."""

    def test_names_and_aliases(self, protocol_table):
        assert protocol_table.lookup("tcp") == 6
        assert protocol_table.lookup("TCP") == 6
        assert protocol_table.lookup("OSPFIGP") == 89
        assert protocol_table.lookup("ipv6-icmp") == 58

    def test_comments_and_malformed_lines_skipped(self, protocol_table):
        assert protocol_table.lookup("broken") is None
        assert protocol_table.lookup("#") is None
        # Only one alias differs from its name after lowercasing
        assert len(protocol_table) == 9

    def test_unknown(self, protocol_table):
        assert protocol_table.lookup("bogus") is None
        assert protocol_table.lookup("") is None

    def test_from_file(self, tmp_path):
        path = tmp_path / "protocols"
        path.write_text("gre\t47\tGRE\t# General Routing Encapsulation\n")
        table = ProtocolTable.from_file(path)
        assert table.lookup("gre") == 47

    def test_entries_are_lowercased(self):
        table = ProtocolTable({"SCTP": 132})
        assert table.lookup("sctp") == 132


class TestDefaultTable:
    """Tests for the lazily loaded process table."""

    def test_loaded_once(self, monkeypatch, tmp_path):
        path = tmp_path / "protocols"
        path.write_text("pim\t103\tPIM\n")
        monkeypatch.setattr(protocols, "_default_table", None)
        monkeypatch.setattr(protocols.settings, "protocols_file", path)

        table = get_protocol_table()
        assert table.lookup("pim") == 103

        path.write_text("vrrp\t112\tVRRP\n")
        assert get_protocol_table() is table
        assert lookup_protocol("vrrp") is None

    def test_missing_file_gives_empty_table(self, monkeypatch, tmp_path):
        monkeypatch.setattr(protocols, "_default_table", None)
        monkeypatch.setattr(protocols.settings, "protocols_file", tmp_path / "missing")

        table = get_protocol_table()
        assert len(table) == 0
        assert lookup_protocol("tcp") is None

    def test_fixture_table_is_default(self):
        assert lookup_protocol("icmp") == 1


class TestInterfaces:
    """Tests for VLAN capability by interface name."""

    @pytest.mark.parametrize("name", ["em0", "igb1", "eth0", "vmx0.100", "lagg0"])
    def test_physical(self, name):
        assert interface_supports_vlan(name)

    @pytest.mark.parametrize("name", ["lo0", "enc0", "ovpns1", "OVPNC2", "wg0", "pflog0", "tun3"])
    def test_pseudo(self, name):
        assert not interface_supports_vlan(name)

    @pytest.mark.parametrize("name", [None, ""])
    def test_unknown_interface(self, name):
        assert interface_supports_vlan(name)

    def test_custom_prefixes(self):
        assert not interface_supports_vlan("vtnet0", prefixes=["vtnet"])
        assert interface_supports_vlan("lo0", prefixes=["vtnet"])
