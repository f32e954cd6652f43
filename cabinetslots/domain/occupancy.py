"""
Tracks which slots existing visits already consume, per cabinet and per doctor.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Set

from .models import ClinicLayout, Pair, RoomSchedule, TimeInterval, VisitRecord, parse_time_of_day


@dataclass
class OccupancyMap:
    """Occupied slots per cabinet and per doctor for one day."""
    rooms: Dict[str, Set[str]]
    providers: Dict[str, Set[str]]

    def is_room_free(self, room_id: str, slot: str) -> bool:
        return slot not in self.rooms.get(room_id, set())

    def is_provider_free(self, provider_id: str, slot: str) -> bool:
        return slot not in self.providers.get(provider_id, set())

    def free_pairs(
        self,
        slot: str,
        room_ids: Iterable[str],
        provider_ids: Iterable[str]
    ) -> List[Pair]:
        """
        Every free cabinet combined with every free doctor at ``slot``,
        cabinets first, both in the given priority order.
        """
        providers = [p for p in provider_ids if self.is_provider_free(p, slot)]
        return [
            Pair(room_id=room_id, provider_id=provider_id)
            for room_id in room_ids
            if self.is_room_free(room_id, slot)
            for provider_id in providers
        ]


class OccupancyTracker:
    """
    Maps visits onto slots using half-open overlap.

    A cabinet is only checked against its own slot list. A doctor can work in
    either cabinet, so doctor occupancy is checked against the union of both
    cabinets' slots.
    """

    def __init__(self, layout: ClinicLayout):
        self.layout = layout

    def track(self, visits: Iterable[VisitRecord], schedule: RoomSchedule) -> OccupancyMap:
        """
        Build the occupancy map for a day.

        Args:
            visits: Existing visits for the day
            schedule: Generated slots per cabinet

        Returns:
            OccupancyMap with a (possibly empty) set for every configured
            cabinet and doctor
        """
        duration = self.layout.appointment_duration
        rooms: Dict[str, Set[str]] = {room_id: set() for room_id in self.layout.room_ids}
        providers: Dict[str, Set[str]] = {p: set() for p in self.layout.provider_ids}

        universe = schedule.slot_universe()
        slot_spans = {slot: self._slot_interval(slot, duration) for slot in universe}

        for visit in visits:
            visit_span = visit.interval(duration)

            if visit.room_id in rooms:
                rooms[visit.room_id].update(
                    slot for slot in schedule.slots.get(visit.room_id, [])
                    if slot_spans[slot].overlaps(visit_span)
                )

            if visit.provider_id in providers:
                providers[visit.provider_id].update(
                    slot for slot in universe
                    if slot_spans[slot].overlaps(visit_span)
                )

        return OccupancyMap(rooms=rooms, providers=providers)

    @staticmethod
    def _slot_interval(slot: str, duration: int) -> TimeInterval:
        start = parse_time_of_day(slot)
        return TimeInterval(start=start, end=start + duration)
