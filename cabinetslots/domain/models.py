"""
Domain models for clinic intervals, slots and allocations.

All times of day are expressed as minutes since midnight of the requested
date, so the core never depends on timezone or locale rules.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

MINUTES_PER_DAY = 24 * 60

_TIME_OF_DAY_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_time_of_day(value: str, allow_end_of_day: bool = False) -> int:
    """
    Parse ``HH:MM`` (or ``HH:MM:SS``, seconds ignored) into minutes since midnight.

    ``24:00`` is accepted only with ``allow_end_of_day``, for interval ends.

    Raises:
        ValueError: If the value is not a valid time of day
    """
    match = _TIME_OF_DAY_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time of day: {value!r}")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if allow_end_of_day and hours == 24 and minutes == 0 and not int(match.group(3) or 0):
        return MINUTES_PER_DAY
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time of day: {value!r}")

    return hours * 60 + minutes


def format_time_of_day(minutes: int) -> str:
    """Format minutes since midnight as a zero-padded ``HH:MM`` string."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class TimeInterval:
    """
    Represents an immutable half-open range ``[start, end)`` on one day.

    Invariant: start must be before end.
    """
    start: int
    end: int

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start {self.start} must be before end {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        """Touching intervals (one ends where the other starts) do not overlap."""
        return self.start < other.end and other.start < self.end

    def clip(self, bounds: "TimeInterval") -> "TimeInterval | None":
        """
        Truncate this interval to the given bounds.
        Returns None if nothing of the interval lies inside them.
        """
        start = max(self.start, bounds.start)
        end = min(self.end, bounds.end)
        if start >= end:
            return None
        return TimeInterval(start=start, end=end)

    def to_dict(self) -> Dict[str, str]:
        return {
            "start": format_time_of_day(self.start),
            "end": format_time_of_day(self.end),
        }

    def __str__(self) -> str:
        return f"{format_time_of_day(self.start)} - {format_time_of_day(self.end)}"


DAY_BOUNDS = TimeInterval(start=0, end=MINUTES_PER_DAY)


@dataclass(frozen=True)
class ClinicLayout:
    """
    Working hours and the fixed two-cabinet, one-or-two-doctor topology.

    Built once from the application config and passed into every domain
    component.
    """
    work_start_hour: int
    work_end_hour: int
    appointment_duration: int
    room1_id: str
    room2_id: str
    provider1_id: str
    provider2_id: Optional[str] = None

    @property
    def room_ids(self) -> Tuple[str, str]:
        """Cabinets in allocation priority order."""
        return (self.room1_id, self.room2_id)

    @property
    def provider_ids(self) -> Tuple[str, ...]:
        """Doctors in allocation priority order."""
        return tuple(p for p in (self.provider1_id, self.provider2_id) if p)

    @property
    def working_interval(self) -> TimeInterval:
        return TimeInterval(
            start=self.work_start_hour * 60,
            end=self.work_end_hour * 60,
        )


@dataclass(frozen=True)
class ScheduleEntry:
    """
    A shift or block record from the CRM schedule.

    ``room_ref`` is None when the record names no cabinet.
    """
    room_ref: Optional[str]
    kind: str
    start: datetime
    end: datetime

    OPEN_KIND = "anonymous shift"

    @property
    def is_open(self) -> bool:
        """Anonymous shifts open a cabinet; every other label blocks it."""
        return (self.kind or "").lower() == self.OPEN_KIND


@dataclass(frozen=True)
class VisitRecord:
    """An existing visit, reduced to cabinet, doctor and time of day."""
    room_id: Optional[str]
    provider_id: Optional[str]
    start: int
    end: Optional[int] = None

    def interval(self, default_duration: int) -> TimeInterval:
        """Visit span; a missing or non-positive end means one default-length appointment."""
        end = self.end
        if end is None or end <= self.start:
            end = self.start + default_duration
        return TimeInterval(start=self.start, end=end)


@dataclass(frozen=True)
class Pair:
    """A cabinet/doctor combination eligible for a booking."""
    room_id: str
    provider_id: str

    def to_dict(self) -> Dict[str, str]:
        return {"roomId": self.room_id, "providerId": self.provider_id}


@dataclass
class RoomSchedule:
    """Open intervals and generated slots for each cabinet on one day."""
    intervals: Dict[str, List[TimeInterval]]
    slots: Dict[str, List[str]]
    used_fallback: bool = False

    def slot_universe(self) -> List[str]:
        """Every slot offered by at least one cabinet."""
        universe = set()
        for room_slots in self.slots.values():
            universe.update(room_slots)
        return sorted(universe)


@dataclass
class AvailabilityResult:
    """Result of an availability query for one date."""
    date: str
    available_slots: List[str]
    occupied_slots: Dict[str, List[str]]
    intervals: Dict[str, List[TimeInterval]]
    free_pairs: Dict[str, List[Pair]] = field(default_factory=dict)

    @property
    def total_slots(self) -> int:
        return len(self.available_slots)

    def to_dict(self) -> Dict[str, object]:
        return {
            "date": self.date,
            "availableSlots": list(self.available_slots),
            "totalSlots": self.total_slots,
            "occupiedSlots": {
                label: list(slots) for label, slots in self.occupied_slots.items()
            },
            "intervals": {
                label: [interval.to_dict() for interval in intervals]
                for label, intervals in self.intervals.items()
            },
            "freePairs": {
                slot: [pair.to_dict() for pair in pairs]
                for slot, pairs in self.free_pairs.items()
            },
        }


@dataclass(frozen=True)
class Allocation:
    """The cabinet/doctor pair chosen for a requested slot."""
    pair: Pair
    appointment_time: str
    end_time: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "roomId": self.pair.room_id,
            "providerId": self.pair.provider_id,
            "appointmentTime": self.appointment_time,
            "endTime": self.end_time,
        }
