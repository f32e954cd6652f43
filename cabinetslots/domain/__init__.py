"""
Domain layer - Pure business logic without external dependencies.
"""

from .allocator import Allocator
from .availability import AvailabilityResolver
from .exceptions import (
    AllocationError,
    CabinetSlotsError,
    DataShapeError,
    UpstreamError,
    ValidationError,
)
from .intervals import merge_intervals, subtract_intervals
from .models import (
    Allocation,
    AvailabilityResult,
    ClinicLayout,
    Pair,
    RoomSchedule,
    ScheduleEntry,
    TimeInterval,
    VisitRecord,
)
from .occupancy import OccupancyMap, OccupancyTracker
from .open_intervals import OpenIntervalBuilder
from .slot_generator import SlotGenerator

__all__ = [
    "Allocation",
    "AllocationError",
    "Allocator",
    "AvailabilityResolver",
    "AvailabilityResult",
    "CabinetSlotsError",
    "ClinicLayout",
    "DataShapeError",
    "OccupancyMap",
    "OccupancyTracker",
    "OpenIntervalBuilder",
    "Pair",
    "RoomSchedule",
    "ScheduleEntry",
    "SlotGenerator",
    "TimeInterval",
    "UpstreamError",
    "ValidationError",
    "VisitRecord",
    "merge_intervals",
    "subtract_intervals",
]
