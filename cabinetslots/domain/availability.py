"""
Combines generated slots and occupancy into the published availability.
"""

from typing import Dict, List

from .models import AvailabilityResult, ClinicLayout, Pair, RoomSchedule
from .occupancy import OccupancyMap

ROOM_LABELS = ("room1", "room2")


class AvailabilityResolver:
    """
    Produces the public slot list and the cabinet/doctor pair matrix.

    A slot is published when at least one cabinet is free at it; the pair
    matrix then lists every free cabinet with every free doctor.
    """

    def __init__(self, layout: ClinicLayout):
        self.layout = layout

    def resolve(
        self,
        date: str,
        schedule: RoomSchedule,
        occupancy: OccupancyMap
    ) -> AvailabilityResult:
        available = set()
        for room_id in self.layout.room_ids:
            available.update(
                slot for slot in schedule.slots.get(room_id, [])
                if occupancy.is_room_free(room_id, slot)
            )

        available_slots = sorted(available)
        free_pairs: Dict[str, List[Pair]] = {
            slot: occupancy.free_pairs(slot, self.layout.room_ids, self.layout.provider_ids)
            for slot in available_slots
        }

        labelled = list(zip(ROOM_LABELS, self.layout.room_ids))

        return AvailabilityResult(
            date=date,
            available_slots=available_slots,
            occupied_slots={
                label: sorted(occupancy.rooms.get(room_id, set()))
                for label, room_id in labelled
            },
            intervals={
                label: list(schedule.intervals.get(room_id, []))
                for label, room_id in labelled
            },
            free_pairs=free_pairs,
        )
