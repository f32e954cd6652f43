"""
Mock clinic CRM client for running without API access.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List


class MockCRMClient:
    """
    Mock client that serves CRM responses from mock_crm_data.json.

    Patients and visits created through it are kept in memory, so a booking
    made in one call is visible to the next availability query on the same
    instance.
    """

    def __init__(self, data: Dict[str, Any] | None = None):
        """
        Initialize the mock client.

        Args:
            data: Optional fixture overriding the bundled JSON file
        """
        self.data = copy.deepcopy(data) if data is not None else self._load_data()
        self.data.setdefault("patients", [])
        self.data.setdefault("visits", [])
        self.data.setdefault("schedule_spaces", [])

    @staticmethod
    def _load_data() -> Dict[str, Any]:
        """Load mock CRM data from JSON file."""
        data_file = Path(__file__).parent / "mock_crm_data.json"

        if data_file.exists():
            with open(data_file, "r", encoding="utf-8") as f:
                return json.load(f)

        # Fallback to empty if file doesn't exist
        return {}

    def get_schedule_spaces(self, date: str) -> List[Dict[str, Any]]:
        return [
            space for space in self.data["schedule_spaces"]
            if str(space.get("space_start", "")).startswith(date)
        ]

    def get_visits(self, date: str) -> List[Dict[str, Any]]:
        return [visit for visit in self.data["visits"] if self._visit_date(visit) == date]

    def create_patient(self, patient: Dict[str, Any]) -> Dict[str, Any]:
        patient_id = 1000 + len(self.data["patients"]) + 1
        self.data["patients"].append({"patient_id": patient_id, **patient})
        return {"data": {"patient_id": patient_id}}

    def create_visit(self, visit: Dict[str, Any]) -> Dict[str, Any]:
        visit_id = 5000 + len(self.data["visits"]) + 1
        self.data["visits"].append({"visit_id": visit_id, **visit})
        return {"data": {"visit_id": visit_id}}

    def get_patient(self, patient_id: str) -> Dict[str, Any]:
        for patient in self.data["patients"]:
            if str(patient["patient_id"]) == str(patient_id):
                return {"data": patient}
        return {"data": None}

    def get_cabinets(self) -> Dict[str, Any]:
        return {"data": self.data.get("cabinets", [])}

    def get_staff(self) -> Dict[str, Any]:
        return {"data": self.data.get("staff", [])}

    def test_connection(self) -> Dict[str, Any]:
        """Mock connection test."""
        return self.get_cabinets()

    @staticmethod
    def _visit_date(visit: Dict[str, Any]) -> str:
        if visit.get("visit_start"):
            return str(visit["visit_start"]).split(" ")[0]
        return str(visit.get("date", ""))
