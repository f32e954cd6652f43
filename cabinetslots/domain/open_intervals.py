"""
Builds per-cabinet open intervals from CRM shift and block records.
"""

from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Tuple

from .intervals import merge_intervals, subtract_intervals
from .models import DAY_BOUNDS, ScheduleEntry, TimeInterval

_ONE_MINUTE = timedelta(minutes=1)


class OpenIntervalBuilder:
    """
    Turns raw schedule records into the times each cabinet can be booked.

    Algorithm:
    1. Drop records that name no cabinet
    2. Clip every record to the requested day
    3. Sort into open (anonymous shift) and blocking intervals per cabinet
    4. Merge the opens into their union and subtract the blocks
    """

    def build(
        self,
        entries: Iterable[ScheduleEntry],
        day: date
    ) -> Dict[str, List[TimeInterval]]:
        """
        Compute open intervals for every cabinet with a record on ``day``.

        Args:
            entries: Shift and block records returned for the day
            day: The calendar date being scheduled

        Returns:
            Dict mapping cabinet id to its sorted open intervals
        """
        day_start = datetime.combine(day, time.min)
        by_room: Dict[str, Tuple[List[TimeInterval], List[TimeInterval]]] = {}

        for entry in entries:
            if entry.room_ref is None:
                continue

            interval = self._clip_to_day(entry, day_start)
            if interval is None:
                continue

            opens, blocks = by_room.setdefault(str(entry.room_ref), ([], []))
            if entry.is_open:
                opens.append(interval)
            else:
                blocks.append(interval)

        return {
            room_id: subtract_intervals(merge_intervals(opens), blocks)
            for room_id, (opens, blocks) in by_room.items()
        }

    @staticmethod
    def _clip_to_day(entry: ScheduleEntry, day_start: datetime) -> TimeInterval | None:
        """
        Express a record relative to the day and clip it to 00:00-24:00.
        Returns None for inverted records or ones lying outside the day.
        """
        start = (entry.start - day_start) // _ONE_MINUTE
        end = (entry.end - day_start) // _ONE_MINUTE

        if start >= end:
            return None

        return TimeInterval(start=start, end=end).clip(DAY_BOUNDS)
