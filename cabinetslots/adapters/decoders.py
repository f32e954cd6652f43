"""
Decoding of CRM payloads into domain records.

Every response is matched against a small set of named shapes. Records that
cannot be interpreted are skipped with a warning; identifiers that cannot be
found raise DataShapeError.
"""

import logging
from typing import Annotated, Any, Callable, Dict, List, Optional, Sequence, Tuple, Type, Union

import pendulum
from pydantic import BaseModel, Field, StrictInt, StringConstraints
from pydantic import ValidationError as PydanticValidationError

from ..domain.exceptions import DataShapeError
from ..domain.models import ScheduleEntry, VisitRecord, parse_time_of_day

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "YYYY-MM-DD HH:mm:ss"

# Upstream has used each of these names for the cabinet of a schedule space.
ROOM_REF_FIELDS = ("schedule_cabinets_id", "cabinet_id", "schedule_cabinet_id")

Identifier = Union[StrictInt, Annotated[str, StringConstraints(strict=True, min_length=1)]]


class ListEnvelope(BaseModel):
    """``{"data": [...]}``; a missing or null ``data`` means no records."""
    data: Optional[List[Dict[str, Any]]] = None


class _PatientIdRecord(BaseModel):
    patient_id: Identifier


class _VisitIdRecord(BaseModel):
    visit_id: Identifier


class _IdRecord(BaseModel):
    id: Identifier


class NestedPatientId(BaseModel):
    """``{"data": {"patient_id": ...}}``"""
    data: _PatientIdRecord


class NestedId(BaseModel):
    """``{"data": {"id": ...}}``"""
    data: _IdRecord


class NestedPatientIdList(BaseModel):
    """``{"data": [{"patient_id": ...}, ...]}``"""
    data: List[_PatientIdRecord] = Field(min_length=1)


class NestedVisitId(BaseModel):
    """``{"data": {"visit_id": ...}}``"""
    data: _VisitIdRecord


IdShape = Tuple[str, Type[BaseModel], Callable[[Any], Any]]

PATIENT_ID_SHAPES: Sequence[IdShape] = (
    ("data.patient_id", NestedPatientId, lambda m: m.data.patient_id),
    ("data.id", NestedId, lambda m: m.data.id),
    ("data[0].patient_id", NestedPatientIdList, lambda m: m.data[0].patient_id),
    ("patient_id", _PatientIdRecord, lambda m: m.patient_id),
    ("id", _IdRecord, lambda m: m.id),
)

VISIT_ID_SHAPES: Sequence[IdShape] = (
    ("data.visit_id", NestedVisitId, lambda m: m.data.visit_id),
    ("data.id", NestedId, lambda m: m.data.id),
    ("visit_id", _VisitIdRecord, lambda m: m.visit_id),
    ("id", _IdRecord, lambda m: m.id),
)


def decode_identifier(payload: Any, shapes: Sequence[IdShape], what: str) -> str:
    """
    Extract an identifier from the first shape ``payload`` matches.

    Raises:
        DataShapeError: If the payload matches none of the shapes
    """
    for _name, model, extract in shapes:
        try:
            parsed = model.model_validate(payload)
        except PydanticValidationError:
            continue
        return str(extract(parsed))

    accepted = ", ".join(name for name, _model, _extract in shapes)
    raise DataShapeError(f"Could not find {what} in CRM response (accepted shapes: {accepted})")


def decode_patient_id(payload: Any) -> str:
    return decode_identifier(payload, PATIENT_ID_SHAPES, "patient id")


def decode_visit_id(payload: Any) -> str | None:
    """The visit already exists at this point, so a missing id is only logged."""
    try:
        return decode_identifier(payload, VISIT_ID_SHAPES, "visit id")
    except DataShapeError as e:
        logger.warning("%s", e)
        return None


def decode_records(payload: Any) -> List[Dict[str, Any]]:
    """
    Unwrap a list response: either ``{"data": [...]}`` or a bare list.

    Raises:
        DataShapeError: If the payload is neither
    """
    if isinstance(payload, list):
        payload = {"data": payload}

    try:
        envelope = ListEnvelope.model_validate(payload)
    except PydanticValidationError as exc:
        raise DataShapeError(f"Unexpected CRM list response: {exc}") from exc

    return envelope.data or []


def _parse_timestamp(value: Any) -> pendulum.DateTime:
    """Parse ``YYYY-MM-DD HH:mm:ss`` as a naive wall-clock time."""
    if not isinstance(value, str):
        raise ValueError(f"Expected timestamp string, got {value!r}")
    return pendulum.from_format(value, TIMESTAMP_FORMAT, tz="UTC").naive()


def _resolve_room_ref(record: Dict[str, Any]) -> Optional[str]:
    for field_name in ROOM_REF_FIELDS:
        value = record.get(field_name)
        if value is not None and value != "":
            return str(value)
    return None


def decode_schedule_entries(records: List[Dict[str, Any]]) -> List[ScheduleEntry]:
    """
    Convert schedule-space records into ScheduleEntry objects.

    Records with unreadable timestamps are skipped.
    """
    entries: List[ScheduleEntry] = []

    for record in records:
        try:
            start = _parse_timestamp(record.get("space_start"))
            end = _parse_timestamp(record.get("space_end"))
        except ValueError as e:
            logger.warning("Skipping schedule space %s: %s", record.get("id"), e)
            continue

        entries.append(
            ScheduleEntry(
                room_ref=_resolve_room_ref(record),
                kind=str(record.get("type") or ""),
                start=start,
                end=end,
            )
        )

    return entries


def _visit_time(
    record: Dict[str, Any],
    combined_field: str,
    split_field: str,
    is_end: bool = False
) -> Optional[int]:
    """
    Time of day of a visit boundary, preferring the combined date-time field.
    Returns None if neither field is present. An end may be ``24:00``.
    """
    combined = record.get(combined_field)
    if combined:
        # "YYYY-MM-DD HH:mm:ss"; only the time part matters for a single-day query
        parts = str(combined).split(" ")
        if len(parts) != 2:
            raise ValueError(f"Invalid {combined_field}: {combined!r}")
        return parse_time_of_day(parts[1], allow_end_of_day=is_end)

    split = record.get(split_field)
    if split:
        return parse_time_of_day(split, allow_end_of_day=is_end)

    return None


def _optional_id(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def decode_visits(records: List[Dict[str, Any]]) -> List[VisitRecord]:
    """
    Convert visit records into VisitRecord objects.

    A visit without a readable start is skipped; an unreadable end falls back
    to the default appointment length.
    """
    visits: List[VisitRecord] = []

    for record in records:
        try:
            start = _visit_time(record, "visit_start", "time_start")
        except ValueError as e:
            logger.warning("Skipping visit %s: %s", record.get("visit_id") or record.get("id"), e)
            continue

        if start is None:
            logger.warning(
                "Skipping visit %s: no visit_start or time_start",
                record.get("visit_id") or record.get("id"),
            )
            continue

        try:
            end = _visit_time(record, "visit_end", "time_end", is_end=True)
        except ValueError as e:
            logger.warning("Ignoring end of visit %s: %s", record.get("visit_id") or record.get("id"), e)
            end = None

        visits.append(
            VisitRecord(
                room_id=_optional_id(record.get("cabinet_id")),
                provider_id=_optional_id(record.get("doctor_id")),
                start=start,
                end=end,
            )
        )

    return visits
