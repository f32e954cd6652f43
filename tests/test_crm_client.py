"""
Tests for the CRM HTTP client.
"""

import pytest
import requests

from cabinetslots.adapters import crm_client
from cabinetslots.adapters.crm_client import CRMClient
from cabinetslots.domain.exceptions import UpstreamError


class FakeResponse:
    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self._payload = payload
        self.status_code = status_code
        self._invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value")
        return self._payload


@pytest.fixture
def calls(monkeypatch):
    """Record outgoing requests and answer with the queued responses."""
    recorded = []
    responses = []

    def fake_request(method, url, **kwargs):
        recorded.append({"method": method, "url": url, **kwargs})
        return responses.pop(0)

    monkeypatch.setattr(crm_client.requests, "request", fake_request)
    return recorded, responses


class TestCRMClient:
    """Tests for CRMClient."""

    def test_get_schedule_spaces(self, calls):
        recorded, responses = calls
        responses.append(FakeResponse({"data": [{"id": 1}]}))
        client = CRMClient(base_url="https://crm.example.com/api/", api_token="tok", timeout=5)

        spaces = client.get_schedule_spaces("2025-10-17")

        assert spaces == [{"id": 1}]
        assert recorded[0]["method"] == "GET"
        assert recorded[0]["url"] == "https://crm.example.com/api/schedule-spaces"
        assert recorded[0]["params"] == {"from": "2025-10-17", "to": "2025-10-17"}
        assert recorded[0]["headers"]["Token"] == "tok"
        assert recorded[0]["timeout"] == 5

    def test_get_visits_without_data(self, calls):
        _recorded, responses = calls
        responses.append(FakeResponse({"data": None}))

        assert CRMClient("https://crm", "tok").get_visits("2025-10-17") == []

    def test_create_patient_posts_json(self, calls):
        recorded, responses = calls
        responses.append(FakeResponse({"data": {"patient_id": 5}}))

        response = CRMClient("https://crm", "tok").create_patient({"firstname": "Ann"})

        assert response == {"data": {"patient_id": 5}}
        assert recorded[0]["method"] == "POST"
        assert recorded[0]["url"] == "https://crm/patients"
        assert recorded[0]["json"] == {"firstname": "Ann"}

    def test_http_error_becomes_upstream_error(self, calls):
        _recorded, responses = calls
        responses.append(FakeResponse(status_code=401))

        with pytest.raises(UpstreamError, match="GET /visits"):
            CRMClient("https://crm", "bad").get_visits("2025-10-17")

    def test_connection_error_becomes_upstream_error(self, monkeypatch):
        def refuse(method, url, **kwargs):
            raise requests.exceptions.ConnectionError("refused")

        monkeypatch.setattr(crm_client.requests, "request", refuse)

        with pytest.raises(UpstreamError):
            CRMClient("https://crm", "tok").get_cabinets()

    def test_invalid_json_becomes_upstream_error(self, calls):
        _recorded, responses = calls
        responses.append(FakeResponse(invalid_json=True))

        with pytest.raises(UpstreamError, match="invalid JSON"):
            CRMClient("https://crm", "tok").get_staff()
