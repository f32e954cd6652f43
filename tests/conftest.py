"""
Shared fixtures for the cabinetslots test suite.
"""

import pytest

from cabinetslots.domain.models import ClinicLayout

ROOM_A = "10000"
ROOM_B = "20000"
DOCTOR_1 = "11111"
DOCTOR_2 = "22222"


@pytest.fixture
def layout() -> ClinicLayout:
    """Two cabinets, two doctors, 09:00-19:00 in 30-minute slots."""
    return ClinicLayout(
        work_start_hour=9,
        work_end_hour=19,
        appointment_duration=30,
        room1_id=ROOM_A,
        room2_id=ROOM_B,
        provider1_id=DOCTOR_1,
        provider2_id=DOCTOR_2,
    )


@pytest.fixture
def single_doctor_layout(layout) -> ClinicLayout:
    return ClinicLayout(
        work_start_hour=layout.work_start_hour,
        work_end_hour=layout.work_end_hour,
        appointment_duration=layout.appointment_duration,
        room1_id=layout.room1_id,
        room2_id=layout.room2_id,
        provider1_id=layout.provider1_id,
    )
