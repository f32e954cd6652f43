"""
First-fit selection of a cabinet/doctor pair for a booking.
"""

from .exceptions import AllocationError, ValidationError
from .models import (
    MINUTES_PER_DAY,
    Allocation,
    ClinicLayout,
    Pair,
    format_time_of_day,
    parse_time_of_day,
)
from .occupancy import OccupancyMap


class Allocator:
    """
    Picks the first free cabinet (cabinet 1, then cabinet 2) and within it
    the first free doctor (doctor 1, then doctor 2).

    Identical occupancy always yields the same pair. Nothing is reserved:
    the slot stays open to concurrent bookings until the visit is written.
    """

    def __init__(self, layout: ClinicLayout):
        self.layout = layout

    def appointment_end(self, slot: str) -> int:
        """
        End of an appointment starting at ``slot``, in minutes since midnight.

        Raises:
            ValidationError: If the slot is malformed or the appointment would
                run past 24:00
        """
        try:
            start = parse_time_of_day(slot)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        end = start + self.layout.appointment_duration
        if end > MINUTES_PER_DAY:
            raise ValidationError(
                f"Appointment at {slot} would end after midnight "
                f"({self.layout.appointment_duration} minutes)"
            )
        return end

    def allocate(self, occupancy: OccupancyMap, date: str, slot: str) -> Allocation:
        """
        Raises:
            ValidationError: If the appointment would run past 24:00
            AllocationError: If no cabinet has a free doctor at ``slot``
        """
        end = self.appointment_end(slot)

        pair = self._first_free_pair(occupancy, slot)
        if pair is None:
            raise AllocationError(date=date, slot=slot)

        return Allocation(
            pair=pair,
            appointment_time=slot,
            end_time=format_time_of_day(end),
        )

    def _first_free_pair(self, occupancy: OccupancyMap, slot: str) -> Pair | None:
        for room_id in self.layout.room_ids:
            if not occupancy.is_room_free(room_id, slot):
                continue
            for provider_id in self.layout.provider_ids:
                if occupancy.is_provider_free(provider_id, slot):
                    return Pair(room_id=room_id, provider_id=provider_id)
        return None
