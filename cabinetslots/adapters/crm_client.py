"""
Clinic CRM API client for schedule, visit and patient data.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from ..domain.exceptions import UpstreamError
from .decoders import decode_records

logger = logging.getLogger(__name__)


class CRMClient:
    """
    Client for the clinic CRM REST API.

    Authenticates with a static ``Token`` header. Every failure, whether in
    transport, status code or body, is raised as UpstreamError and never
    retried.
    """

    def __init__(self, base_url: str, api_token: str, timeout: float = 30.0):
        """
        Initialize the CRM client.

        Args:
            base_url: API root, e.g. https://cliniccards.com/api
            api_token: Value sent in the ``Token`` header
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Token": api_token,
            "Content-Type": "application/json",
        }

    def get_schedule_spaces(self, date: str) -> List[Dict[str, Any]]:
        """Shift and block records (schedule spaces) for one day."""
        payload = self._request("GET", "/schedule-spaces", params={"from": date, "to": date})
        return decode_records(payload)

    def get_visits(self, date: str) -> List[Dict[str, Any]]:
        """Existing visits for one day."""
        payload = self._request("GET", "/visits", params={"from": date, "to": date})
        return decode_records(payload)

    def create_patient(self, patient: Dict[str, Any]) -> Any:
        return self._request("POST", "/patients", json=patient)

    def create_visit(self, visit: Dict[str, Any]) -> Any:
        return self._request("POST", "/visits", json=visit)

    def get_patient(self, patient_id: str) -> Any:
        return self._request("GET", f"/patients/{patient_id}")

    def get_cabinets(self) -> Any:
        return self._request("GET", "/cabinets")

    def get_staff(self) -> Any:
        return self._request("GET", "/staff")

    def test_connection(self) -> Any:
        """
        Verify the token by listing cabinets.

        Raises:
            UpstreamError: If the CRM cannot be reached or rejects the token
        """
        return self.get_cabinets()

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None
    ) -> Any:
        url = f"{self.base_url}{endpoint}"

        try:
            response = requests.request(
                method,
                url,
                headers=self.headers,
                params=params,
                json=json,
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error("CRM API error (%s %s): %s", method, endpoint, e)
            raise UpstreamError(f"CRM request {method} {endpoint} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            logger.error("CRM API returned invalid JSON (%s %s): %s", method, endpoint, e)
            raise UpstreamError(f"CRM request {method} {endpoint} returned invalid JSON") from e
