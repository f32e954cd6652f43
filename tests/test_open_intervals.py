"""
Tests for the open interval builder.
"""

import random
from datetime import date, datetime

from cabinetslots.domain.models import ScheduleEntry, TimeInterval, parse_time_of_day
from cabinetslots.domain.open_intervals import OpenIntervalBuilder

DAY = date(2025, 10, 17)


def entry(room, kind, start, end, day=DAY, end_day=None) -> ScheduleEntry:
    end_day = end_day or day
    return ScheduleEntry(
        room_ref=room,
        kind=kind,
        start=datetime.fromisoformat(f"{day.isoformat()} {start}"),
        end=datetime.fromisoformat(f"{end_day.isoformat()} {end}"),
    )


def span(start: str, end: str) -> TimeInterval:
    return TimeInterval(start=parse_time_of_day(start), end=parse_time_of_day(end))


class TestOpenIntervalBuilder:
    """Tests for OpenIntervalBuilder."""

    def test_single_shift(self):
        """Test that one anonymous shift becomes one open interval."""
        result = OpenIntervalBuilder().build(
            [entry("A", "Anonymous shift", "09:00:00", "12:00:00")], DAY
        )

        assert result == {"A": [span("09:00", "12:00")]}

    def test_block_is_subtracted(self):
        """Test that a clean-up block cuts the shift."""
        result = OpenIntervalBuilder().build(
            [
                entry("A", "Anonymous shift", "09:00:00", "12:00:00"),
                entry("A", "Clean-up", "10:00:00", "10:30:00"),
            ],
            DAY,
        )

        assert result == {"A": [span("09:00", "10:00"), span("10:30", "12:00")]}

    def test_kind_is_case_insensitive(self):
        result = OpenIntervalBuilder().build(
            [entry("A", "ANONYMOUS SHIFT", "09:00:00", "10:00:00")], DAY
        )

        assert result == {"A": [span("09:00", "10:00")]}

    def test_blocks_only_affect_their_room(self):
        result = OpenIntervalBuilder().build(
            [
                entry("A", "Anonymous shift", "09:00:00", "12:00:00"),
                entry("B", "Anonymous shift", "09:00:00", "12:00:00"),
                entry("B", "Rest", "09:00:00", "10:00:00"),
            ],
            DAY,
        )

        assert result["A"] == [span("09:00", "12:00")]
        assert result["B"] == [span("10:00", "12:00")]

    def test_room_with_only_blocks_has_no_intervals(self):
        result = OpenIntervalBuilder().build([entry("A", "Rest", "09:00:00", "10:00:00")], DAY)

        assert result == {"A": []}

    def test_records_without_room_are_skipped(self):
        """Test that unattributable records are ignored."""
        result = OpenIntervalBuilder().build(
            [
                entry(None, "Anonymous shift", "09:00:00", "12:00:00"),
                entry("A", "Anonymous shift", "13:00:00", "14:00:00"),
            ],
            DAY,
        )

        assert result == {"A": [span("13:00", "14:00")]}

    def test_shift_is_clipped_to_the_day(self):
        """Test that a shift running past midnight ends at 24:00."""
        result = OpenIntervalBuilder().build(
            [entry("A", "Anonymous shift", "20:00:00", "02:00:00", end_day=date(2025, 10, 18))],
            DAY,
        )

        assert result == {"A": [TimeInterval(start=parse_time_of_day("20:00"), end=1440)]}

    def test_record_on_another_day_is_dropped(self):
        result = OpenIntervalBuilder().build(
            [entry("A", "Anonymous shift", "09:00:00", "12:00:00", day=date(2025, 10, 16))],
            DAY,
        )

        assert result == {}

    def test_anonymous_shifts_only_give_their_union(self):
        """Test that shift-only input covers exactly the clipped shifts."""
        result = OpenIntervalBuilder().build(
            [
                entry("A", "anonymous shift", "09:00:00", "11:00:00"),
                entry("A", "anonymous shift", "13:00:00", "15:00:00"),
            ],
            DAY,
        )

        assert result == {"A": [span("09:00", "11:00"), span("13:00", "15:00")]}

    def test_result_does_not_depend_on_record_order(self):
        entries = [
            entry("A", "Anonymous shift", "09:00:00", "15:00:00"),
            entry("A", "Clean-up", "10:00:00", "10:30:00"),
            entry("A", "Rest", "12:00:00", "13:00:00"),
            entry("B", "Anonymous shift", "12:00:00", "19:00:00"),
            entry("B", "Rest", "15:00:00", "16:00:00"),
        ]
        expected = OpenIntervalBuilder().build(entries, DAY)

        shuffled = list(entries)
        random.Random(7).shuffle(shuffled)

        assert OpenIntervalBuilder().build(shuffled, DAY) == expected

    def test_overlapping_shifts_give_their_union(self):
        """Test that overlapping shifts become a single non-overlapping interval."""
        result = OpenIntervalBuilder().build(
            [
                entry("A", "Anonymous shift", "09:00:00", "10:45:00"),
                entry("A", "Anonymous shift", "10:15:00", "12:00:00"),
            ],
            DAY,
        )

        assert result == {"A": [span("09:00", "12:00")]}

    def test_block_cuts_merged_shifts(self):
        result = OpenIntervalBuilder().build(
            [
                entry("A", "Anonymous shift", "09:00:00", "11:00:00"),
                entry("A", "Anonymous shift", "11:00:00", "13:00:00"),
                entry("A", "Rest", "10:30:00", "11:30:00"),
            ],
            DAY,
        )

        assert result == {"A": [span("09:00", "10:30"), span("11:30", "13:00")]}

    def test_open_intervals_never_overlap(self):
        entries = [
            entry("A", "Anonymous shift", "08:00:00", "12:00:00"),
            entry("A", "Anonymous shift", "09:30:00", "14:00:00"),
            entry("A", "Anonymous shift", "13:45:00", "16:00:00"),
            entry("A", "Clean-up", "12:00:00", "12:15:00"),
        ]

        intervals = OpenIntervalBuilder().build(entries, DAY)["A"]

        for left, right in zip(intervals, intervals[1:]):
            assert left.end <= right.start
