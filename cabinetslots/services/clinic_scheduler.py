"""
Application service for availability queries and appointment booking.

The service fetches schedule and visit data through a CRM client adapter and
hands it to the domain components. Booking is not transactional: the patient
is created before a cabinet/doctor pair is allocated, and stays in the CRM if
allocation fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

import pendulum

from ..adapters.decoders import (
    decode_patient_id,
    decode_schedule_entries,
    decode_visit_id,
    decode_visits,
)
from ..domain.allocator import Allocator
from ..domain.availability import AvailabilityResolver
from ..domain.exceptions import AllocationError
from ..domain.models import Allocation, AvailabilityResult, ClinicLayout
from ..domain.occupancy import OccupancyTracker
from ..domain.open_intervals import OpenIntervalBuilder
from ..domain.slot_generator import SlotGenerator
from .validation import BookingRequest, parse_date

logger = logging.getLogger(__name__)


class CRMClientProtocol(Protocol):
    """Protocol describing the CRM client behaviour needed by the service."""

    def get_schedule_spaces(self, date: str) -> List[Dict[str, Any]]:
        """Return shift and block records for the day."""

    def get_visits(self, date: str) -> List[Dict[str, Any]]:
        """Return existing visits for the day."""

    def create_patient(self, patient: Dict[str, Any]) -> Any:
        """Create a patient and return the raw CRM response."""

    def create_visit(self, visit: Dict[str, Any]) -> Any:
        """Create a visit and return the raw CRM response."""


@dataclass(frozen=True)
class BookingResult:
    """Outcome of a successful booking."""
    patient_id: str
    visit_id: Optional[str]
    appointment_date: str
    allocation: Allocation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "patientId": self.patient_id,
            "visitId": self.visit_id,
            "appointmentDate": self.appointment_date,
            **self.allocation.to_dict(),
        }


class ClinicSchedulerService:
    """
    Orchestrates CRM reads and writes around the availability engine.

    The engine itself is pure: ``calculate_availability`` and ``allocate``
    work on already-fetched records, which keeps them testable without a
    CRM.
    """

    def __init__(
        self,
        crm_client: CRMClientProtocol,
        layout: ClinicLayout,
        clock: Callable[[], pendulum.DateTime] = pendulum.now,
    ) -> None:
        self._crm_client = crm_client
        self._layout = layout
        self._clock = clock
        self._builder = OpenIntervalBuilder()
        self._generator = SlotGenerator(layout)
        self._tracker = OccupancyTracker(layout)
        self._resolver = AvailabilityResolver(layout)
        self._allocator = Allocator(layout)

    def get_available_times(self, date: str) -> AvailabilityResult:
        """
        Fetch the day's schedule and visits and compute availability.

        Raises:
            ValidationError: If ``date`` is not a strict YYYY-MM-DD date
            UpstreamError: If a CRM read fails
        """
        parse_date(date)

        schedule_records = self._crm_client.get_schedule_spaces(date)
        visit_records = self._crm_client.get_visits(date)

        return self.calculate_availability(
            date=date,
            schedule_records=schedule_records,
            visit_records=visit_records,
        )

    def calculate_availability(
        self,
        *,
        date: str,
        schedule_records: List[Dict[str, Any]],
        visit_records: List[Dict[str, Any]],
    ) -> AvailabilityResult:
        """Compute availability from already-fetched CRM records."""
        day = parse_date(date)

        entries = decode_schedule_entries(schedule_records)
        open_intervals = self._builder.build(entries, day)
        schedule = self._generator.generate(open_intervals, record_count=len(schedule_records))

        if schedule.used_fallback:
            logger.info("No usable schedule spaces for %s, assuming working hours", date)

        occupancy = self._tracker.track(decode_visits(visit_records), schedule)
        return self._resolver.resolve(date, schedule, occupancy)

    def allocate(
        self,
        *,
        date: str,
        slot: str,
        visit_records: List[Dict[str, Any]],
    ) -> Allocation:
        """
        Choose a cabinet/doctor pair for ``slot`` given the day's visits.

        Booking checks visits against the working-hours slot grid; schedule
        spaces are not consulted.

        Raises:
            AllocationError: If no pair is free
        """
        schedule = self._generator.fallback_schedule(extra_slots=[slot])
        occupancy = self._tracker.track(decode_visits(visit_records), schedule)
        return self._allocator.allocate(occupancy, date, slot)

    def book_appointment(self, payload: Mapping[str, Any]) -> BookingResult:
        """
        Create the patient, allocate a pair and create the visit.

        Raises:
            ValidationError: If the request is incomplete or malformed, or the
                appointment would run past midnight
            UpstreamError: If a CRM call fails
            DataShapeError: If the created patient's id cannot be found
            AllocationError: If the slot is taken; ``patient_id`` names the
                patient record already created
        """
        request = BookingRequest.from_payload(payload)
        self._allocator.appointment_end(request.appointment_time)

        patient_response = self._crm_client.create_patient(self._patient_payload(request))
        patient_id = decode_patient_id(patient_response)
        logger.info("Created patient %s", patient_id)

        visit_records = self._crm_client.get_visits(request.appointment_date)

        try:
            allocation = self.allocate(
                date=request.appointment_date,
                slot=request.appointment_time,
                visit_records=visit_records,
            )
        except AllocationError as exc:
            exc.patient_id = patient_id
            logger.warning(
                "No free cabinet/doctor at %s %s; patient %s has no visit",
                request.appointment_date,
                request.appointment_time,
                patient_id,
            )
            raise

        visit_response = self._crm_client.create_visit(
            self._visit_payload(request, patient_id, allocation)
        )
        visit_id = decode_visit_id(visit_response)

        logger.info(
            "Booked visit %s for patient %s in cabinet %s with doctor %s at %s %s",
            visit_id,
            patient_id,
            allocation.pair.room_id,
            allocation.pair.provider_id,
            request.appointment_date,
            allocation.appointment_time,
        )

        return BookingResult(
            patient_id=patient_id,
            visit_id=visit_id,
            appointment_date=request.appointment_date,
            allocation=allocation,
        )

    def _patient_payload(self, request: BookingRequest) -> Dict[str, Any]:
        now = self._clock()
        return {
            "firstname": request.first_name,
            "lastname": request.last_name,
            "phone": request.phone,
            "email": request.email,
            "gender": request.gender,
            "address": request.address,
            "note": request.note or f"Appointment created via website {now.format('YYYY-MM-DD HH:mm')}",
            "date_created": now.format("YYYY-MM-DD"),
            "preferred_contact": "PHONE",
        }

    @staticmethod
    def _visit_payload(
        request: BookingRequest,
        patient_id: str,
        allocation: Allocation,
    ) -> Dict[str, Any]:
        return {
            "status": "PLANNED",
            "patient_id": patient_id,
            "cabinet_id": allocation.pair.room_id,
            "doctor_id": allocation.pair.provider_id,
            "note": (
                f"Booked via website. Patient: {request.first_name} {request.last_name}, "
                f"phone: {request.phone}, email: {request.email or '-'}"
            ),
            "date": request.appointment_date,
            "time_start": allocation.appointment_time,
            "time_end": allocation.end_time,
        }
