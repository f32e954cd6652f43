"""
Discretizes open intervals into bookable appointment start times.
"""

from typing import Dict, Iterable, List

from .models import ClinicLayout, RoomSchedule, TimeInterval, format_time_of_day


class SlotGenerator:
    """
    Generates fixed-length slots for each cabinet.

    Slots normally come from the cabinet's open intervals. When the CRM
    returned no schedule records at all, or none of them produced a slot in
    either cabinet, both cabinets fall back to the configured working hours
    so that missing schedule data never reads as a fully booked day.
    """

    def __init__(self, layout: ClinicLayout):
        self.layout = layout

    def generate(
        self,
        open_intervals: Dict[str, List[TimeInterval]],
        record_count: int
    ) -> RoomSchedule:
        """
        Build the per-cabinet slot lists for a day.

        Args:
            open_intervals: Output of ``OpenIntervalBuilder.build``
            record_count: Number of raw schedule records fetched for the day

        Returns:
            RoomSchedule holding intervals and slots for both cabinets
        """
        intervals = {
            room_id: list(open_intervals.get(room_id, []))
            for room_id in self.layout.room_ids
        }
        slots = {
            room_id: self.slots_from_intervals(room_intervals)
            for room_id, room_intervals in intervals.items()
        }

        if record_count == 0 or not any(slots.values()):
            return self.fallback_schedule()

        return RoomSchedule(intervals=intervals, slots=slots)

    def fallback_schedule(self, extra_slots: Iterable[str] = ()) -> RoomSchedule:
        """
        Both cabinets open for the whole working day.

        ``extra_slots`` are added to both slot lists, so a booking request for
        an off-grid time is still checked against existing visits.
        """
        working = self.layout.working_interval
        static = sorted(set(self.static_slots()).union(extra_slots))

        return RoomSchedule(
            intervals={room_id: [working] for room_id in self.layout.room_ids},
            slots={room_id: list(static) for room_id in self.layout.room_ids},
            used_fallback=True,
        )

    def slots_from_intervals(self, intervals: Iterable[TimeInterval]) -> List[str]:
        """
        Step through each interval in ``appointment_duration`` increments.

        A start is accepted only if the whole appointment fits before the
        interval ends. Starts produced by several intervals appear once.
        """
        duration = self.layout.appointment_duration
        starts = set()

        for interval in intervals:
            candidate = interval.start
            while candidate + duration <= interval.end:
                starts.add(candidate)
                candidate += duration

        return [format_time_of_day(start) for start in sorted(starts)]

    def static_slots(self) -> List[str]:
        """Every slot within working hours, ignoring schedule records."""
        return self.slots_from_intervals([self.layout.working_interval])
