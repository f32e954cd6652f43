"""
Tests for occupancy tracking.
"""

from cabinetslots.domain.models import RoomSchedule, VisitRecord, parse_time_of_day
from cabinetslots.domain.occupancy import OccupancyTracker

from conftest import DOCTOR_1, DOCTOR_2, ROOM_A, ROOM_B


def visit(room, doctor, start, end=None) -> VisitRecord:
    return VisitRecord(
        room_id=room,
        provider_id=doctor,
        start=parse_time_of_day(start),
        end=parse_time_of_day(end) if end else None,
    )


def schedule(room_a_slots, room_b_slots) -> RoomSchedule:
    return RoomSchedule(intervals={}, slots={ROOM_A: room_a_slots, ROOM_B: room_b_slots})


class TestOccupancyTracker:
    """Tests for OccupancyTracker."""

    def test_visit_marks_overlapping_slots_only(self, layout):
        """Test half-open overlap: the slot after the visit stays free."""
        occupancy = OccupancyTracker(layout).track(
            [visit(ROOM_A, DOCTOR_1, "09:00", "09:30")],
            schedule(["09:00", "09:30", "10:00"], []),
        )

        assert occupancy.rooms[ROOM_A] == {"09:00"}
        assert occupancy.rooms[ROOM_B] == set()

    def test_visit_off_the_grid(self, layout):
        """Test that a 09:15-09:45 visit blocks both slots it touches."""
        occupancy = OccupancyTracker(layout).track(
            [visit(ROOM_A, DOCTOR_1, "09:15", "09:45")],
            schedule(["09:00", "09:30", "10:00"], []),
        )

        assert occupancy.rooms[ROOM_A] == {"09:00", "09:30"}

    def test_missing_end_defaults_to_one_appointment(self, layout):
        occupancy = OccupancyTracker(layout).track(
            [visit(ROOM_A, DOCTOR_1, "14:00")],
            schedule(["13:30", "14:00", "14:30"], []),
        )

        assert occupancy.rooms[ROOM_A] == {"14:00"}

    def test_room_occupancy_uses_own_slot_list(self, layout):
        """Test that a cabinet is only marked on slots it offers."""
        occupancy = OccupancyTracker(layout).track(
            [visit(ROOM_A, DOCTOR_1, "09:00", "11:00")],
            schedule(["09:00"], ["09:00", "09:30", "10:00", "10:30"]),
        )

        assert occupancy.rooms[ROOM_A] == {"09:00"}

    def test_doctor_occupancy_uses_both_slot_lists(self, layout):
        """Test that a doctor is busy on every slot of either cabinet."""
        occupancy = OccupancyTracker(layout).track(
            [visit(ROOM_A, DOCTOR_1, "09:00", "11:00")],
            schedule(["09:00"], ["09:00", "09:30", "10:00", "10:30"]),
        )

        assert occupancy.providers[DOCTOR_1] == {"09:00", "09:30", "10:00", "10:30"}
        assert occupancy.providers[DOCTOR_2] == set()

    def test_unknown_room_and_doctor_are_ignored(self, layout):
        occupancy = OccupancyTracker(layout).track(
            [visit("55555", "77777", "09:00", "10:00")],
            schedule(["09:00"], ["09:00"]),
        )

        assert occupancy.rooms == {ROOM_A: set(), ROOM_B: set()}
        assert occupancy.providers == {DOCTOR_1: set(), DOCTOR_2: set()}

    def test_doctor_in_other_room_blocks_doctor_not_room(self, layout):
        occupancy = OccupancyTracker(layout).track(
            [visit(ROOM_B, DOCTOR_2, "09:00", "09:30")],
            schedule(["09:00"], ["09:00"]),
        )

        assert occupancy.is_room_free(ROOM_A, "09:00")
        assert not occupancy.is_room_free(ROOM_B, "09:00")
        assert not occupancy.is_provider_free(DOCTOR_2, "09:00")
        assert occupancy.is_provider_free(DOCTOR_1, "09:00")
