"""
Tests for the REST API.
"""

import pytest
from fastapi.testclient import TestClient

from capfilter.main import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "capfilter"
        assert "protocols_file" in data


class TestCompileEndpoint:
    """Tests for POST /api/compile."""

    def test_compile(self, client):
        response = client.post("/api/compile", json={
            "attributes": [
                {"type": "ipaddress", "section": 0, "match": "any_of", "input": "10.0.5.50 10.0.5.51"},
                {"type": "protocol", "section": 0, "match": "any_of", "input": "icmp"},
                {"type": "ethertype", "section": 0, "match": "or_any_of", "input": "arp"},
                {"type": "section_match", "section": 1, "match": "none"},
            ],
        })
        assert response.status_code == 200

        data = response.json()
        assert data["expression"] == (
            "((host 10.0.5.50 or host 10.0.5.51) and (proto 1) or (arp)) and (not vlan)"
        )
        assert data["vlan_supported"] is True
        assert len(data["attributes"]) == 4
        assert data["attributes"][2]["required"] is False

    def test_empty_request(self, client):
        response = client.post("/api/compile", json={})
        assert response.status_code == 200
        assert response.json()["expression"] == ""

    def test_preset(self, client):
        response = client.post("/api/compile", json={
            "attributes": [{"type": "attribute_preset", "section": "preset", "match": "tagged"}],
        })
        assert response.json()["expression"] == "vlan"

    def test_pseudo_interface_disables_vlan(self, client):
        response = client.post("/api/compile", json={
            "interface": "lo0",
            "attributes": [
                {"type": "ipaddress", "section": 0, "match": "any_of", "input": "10.0.0.1"},
                {"type": "port", "section": 1, "match": "any_of", "input": "80"},
            ],
        })
        data = response.json()
        assert data["vlan_supported"] is False
        assert data["expression"] == "(host 10.0.0.1)"

    def test_explicit_flag_overrides_interface(self, client):
        response = client.post("/api/compile", json={
            "interface": "lo0",
            "vlan_supported": True,
            "attributes": [{"type": "port", "section": 1, "match": "any_of", "input": "80"}],
        })
        assert response.json()["expression"] == "vlan and (port 80)"

    def test_invalid_input(self, client):
        response = client.post("/api/compile", json={
            "attributes": [{"type": "port", "section": 0, "match": "any_of", "input": "80 http"}],
        })
        assert response.status_code == 422

        detail = response.json()["detail"]
        assert detail["error_type"] == "invalid_port"
        assert detail["token"] == "http"

    def test_invalid_attribute(self, client):
        response = client.post("/api/compile", json={
            "attributes": [{"type": "port", "section": 12, "match": "any_of"}],
        })
        assert response.status_code == 422
        assert response.json()["detail"]["field"] == "section"

    def test_unsupported_vlan_filter(self, client):
        response = client.post("/api/compile", json={
            "vlan_supported": False,
            "attributes": [{"type": "attribute_preset", "section": "preset", "match": "tagged"}],
        })
        assert response.status_code == 422
        assert response.json()["detail"]["error_type"] == "unsupported_vlan_filter"


class TestValidateEndpoint:
    """Tests for POST /api/attributes/validate."""

    def test_valid(self, client):
        response = client.post("/api/attributes/validate", json={
            "type": "macaddress", "section": "2", "match": "none_of", "input": "00:1b",
        })
        assert response.status_code == 200

        data = response.json()
        assert data["section"] == 2
        assert data["exclude"] is True
        assert data["filter"] == "not (ether[0:2] = 0x001b or ether[6:2] = 0x001b)"

    def test_invalid(self, client):
        response = client.post("/api/attributes/validate", json={
            "type": "ethertype", "section": 0, "match": "any_of", "input": "8100",
        })
        assert response.status_code == 422
        assert response.json()["detail"]["error_type"] == "invalid_ethertype"


class TestProtocolEndpoint:
    """Tests for GET /api/protocols/{name}."""

    def test_known(self, client):
        response = client.get("/api/protocols/TCP")
        assert response.status_code == 200
        assert response.json() == {"name": "tcp", "number": 6}

    def test_unknown(self, client):
        response = client.get("/api/protocols/bogus")
        assert response.status_code == 404
