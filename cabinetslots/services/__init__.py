"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .clinic_scheduler import BookingResult, ClinicSchedulerService, CRMClientProtocol
from .validation import BookingRequest, parse_date

__all__ = [
    "BookingRequest",
    "BookingResult",
    "ClinicSchedulerService",
    "CRMClientProtocol",
    "parse_date",
]
