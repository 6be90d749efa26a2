"""
Tests for the command line interface.
"""

import json

import pytest

from capfilter.cli import EXIT_FILTER_ERROR, main, parse_attribute
from capfilter.filters import AttributeType, InvalidPort, Match


class TestParseAttribute:
    """Tests for SECTION:TYPE:MATCH[:INPUT] parsing."""

    def test_with_input(self):
        attr = parse_attribute("1:port:or_any_of:80 443")
        assert attr.section == 1
        assert attr.type == AttributeType.PORT
        assert attr.operator == Match.OR_ANY_OF
        assert attr.filter_string == "port 80 or port 443"

    def test_input_may_contain_colons(self):
        attr = parse_attribute("0:macaddress:any_of:00:1b:63:84:45:e6")
        assert attr.filter_string == "ether host 00:1b:63:84:45:e6"

    def test_without_input(self):
        attr = parse_attribute("2:section_match:all_of")
        assert attr.input_string == ""

    def test_too_few_fields(self):
        with pytest.raises(ValueError):
            parse_attribute("0:port")

    def test_invalid_input(self):
        with pytest.raises(InvalidPort):
            parse_attribute("0:port:any_of:http")


class TestMain:
    """Tests for the CLI entry point."""

    def _json(self, capsys) -> dict:
        return json.loads(capsys.readouterr().out)

    def test_json_output(self, capsys):
        code = main([
            "-a", "0:ipaddress:any_of:10.0.5.50 10.0.5.51",
            "-a", "0:protocol:any_of:icmp",
            "-a", "0:ethertype:or_any_of:arp",
            "-a", "1:section_match:none",
            "--json",
        ])
        assert code == 0
        assert self._json(capsys) == {
            "expression": "((host 10.0.5.50 or host 10.0.5.51) and (proto 1) or (arp)) and (not vlan)",
            "vlan_supported": True,
        }

    def test_preset(self, capsys):
        assert main(["--preset", "untagged", "--json"]) == 0
        assert self._json(capsys)["expression"] == "not vlan"

    def test_pseudo_interface(self, capsys):
        code = main(["-i", "lo0", "-a", "0:port:any_of:53", "-a", "1:port:any_of:80", "--json"])
        assert code == 0

        data = self._json(capsys)
        assert data["vlan_supported"] is False
        assert data["expression"] == "(port 53)"

    def test_no_vlan_flag(self, capsys):
        code = main(["--preset", "tagged", "--no-vlan", "--json"])
        assert code == EXIT_FILTER_ERROR
        assert self._json(capsys)["error"]["error_type"] == "unsupported_vlan_filter"

    def test_invalid_attribute_json(self, capsys):
        code = main(["-a", "0:port:any_of:80 http", "--json"])
        assert code == EXIT_FILTER_ERROR

        error = self._json(capsys)["error"]
        assert error["error_type"] == "invalid_port"
        assert error["token"] == "http"

    def test_malformed_attribute_json(self, capsys):
        assert main(["-a", "0:port", "--json"]) == EXIT_FILTER_ERROR
        assert "SECTION:TYPE:MATCH" in self._json(capsys)["error"]["message"]

    def test_rich_output(self, capsys):
        assert main(["-a", "1:port:any_of:80"]) == 0

        out = capsys.readouterr().out
        assert "capfilter" in out
        assert "vlan and (port 80)" in out

    def test_rich_error(self, capsys):
        assert main(["-a", "0:port:any_of:http"]) == EXIT_FILTER_ERROR
        assert "Invalid port: 'http'" in capsys.readouterr().out
