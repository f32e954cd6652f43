"""
Validation of incoming availability and booking requests.
"""

import re
from datetime import date
from typing import Any, Mapping, Optional

import pendulum
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..domain.exceptions import ValidationError
from ..domain.models import format_time_of_day, parse_time_of_day

DATE_FORMAT = "YYYY-MM-DD"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(value: Any) -> date:
    """
    Parse a strict ``YYYY-MM-DD`` calendar date.

    Raises:
        ValidationError: If the value is not a real calendar date in that format
    """
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise ValidationError(f"Invalid date format {value!r}. Use YYYY-MM-DD")

    try:
        return pendulum.from_format(value, DATE_FORMAT, tz="UTC").date()
    except ValueError as exc:
        raise ValidationError(f"Invalid date {value!r}: {exc}") from exc


class BookingRequest(BaseModel):
    """
    A patient's request for an appointment.

    Accepts both snake_case and the camelCase field names used by the
    website form (``firstName``, ``appointmentTime``, ...).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str
    last_name: str
    phone: str
    appointment_date: str
    appointment_time: str
    email: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    note: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("phone")
    @classmethod
    def digits_only(cls, value: str) -> str:
        """Keep only the digits of the phone number."""
        digits = re.sub(r"\D", "", value)
        if not digits:
            raise ValueError("must contain digits")
        return digits

    @field_validator("appointment_date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        try:
            parse_date(value)
        except ValidationError as exc:
            raise ValueError(str(exc)) from exc
        return value

    @field_validator("appointment_time")
    @classmethod
    def normalize_time(cls, value: str) -> str:
        """Accept ``H:MM`` or ``HH:MM`` and store the zero-padded form."""
        return format_time_of_day(parse_time_of_day(value))

    @field_validator("email", "gender", "address", "note")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "BookingRequest":
        """
        Validate a raw request body.

        Raises:
            ValidationError: Listing every missing or malformed field
        """
        try:
            return cls.model_validate(dict(payload))
        except PydanticValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in exc.errors()
            )
            raise ValidationError(f"Invalid booking request: {problems}") from exc
