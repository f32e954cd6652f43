"""
Domain-specific exception hierarchy for the cabinetslots application.
"""


class CabinetSlotsError(Exception):
    """Base class for all application-level errors."""


class ValidationError(CabinetSlotsError):
    """Raised when a request carries a malformed date, time or missing fields."""


class UpstreamError(CabinetSlotsError):
    """Raised when a read or write against the CRM fails."""


class DataShapeError(CabinetSlotsError):
    """Raised when a CRM response matches none of the accepted shapes."""


class AllocationError(CabinetSlotsError):
    """
    Raised when no cabinet/doctor pair is free for the requested slot.

    Patient creation happens before allocation, so ``patient_id`` names the
    record left behind in the CRM when booking fails here.
    """

    def __init__(self, date: str, slot: str, patient_id: str | None = None):
        self.date = date
        self.slot = slot
        self.patient_id = patient_id
        super().__init__(f"Selected time slot {date} {slot} is no longer available")
