"""
Visit Date Guard.

Pre-submission checks for vitals and assessment writes: visit date
validation, numeric measurement validation, and the one-record-per-date
conflict check. Each record kind is checked against its own dates only.

The conflict check is advisory: two submissions racing for the same
patient and date can both pass it. The backend owns the final word.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from .backend import BackendClient
from .errors import TransportError, ValidationError
from .records import RecordKind, record_visit_value, to_calendar_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeasurementBounds:
    """Accepted clinical ranges for vitals entry (inclusive)."""

    height_min_cm: float = 50.0
    height_max_cm: float = 250.0
    weight_min_kg: float = 2.0
    weight_max_kg: float = 300.0


DEFAULT_BOUNDS = MeasurementBounds()


def has_conflict(existing_dates: Iterable[date], candidate_date: Any) -> bool:
    """True when a record already exists on the candidate's calendar date.

    Existing entries may be dates, datetimes or ISO strings; all of them are
    compared on their calendar date.
    """
    candidate = to_calendar_date(candidate_date)
    if candidate is None:
        return False
    existing = {d for d in map(to_calendar_date, existing_dates) if d is not None}
    return candidate in existing


def existing_dates_from(records: Iterable[Any]) -> set[date]:
    """Calendar dates of the given raw records (visit date, else created_at)."""
    dates = set()
    for record in records:
        if not isinstance(record, dict):
            continue
        visit = to_calendar_date(record_visit_value(record))
        if visit is not None:
            dates.add(visit)
    return dates


async def load_existing_dates(backend: BackendClient, patient_id: str, kind: RecordKind) -> set[date]:
    """
    Fetch the calendar dates a patient already has records for.

    A failed read is treated as "no records" and logged; the conflict check
    then passes and the backend remains the last line of defence.

    Args:
        backend: Records backend client
        patient_id: Backend patient id
        kind: Which record kind to check

    Returns:
        Set of calendar dates with an existing record of that kind
    """
    try:
        records = await backend.list_records(kind, patient_id)
    except TransportError as e:
        logger.warning(f"[GUARD] Could not load {kind.value} dates for {patient_id}: {e.message}")
        return set()

    dates = existing_dates_from(records)
    logger.debug(f"[GUARD] {len(dates)} existing {kind.value} dates for {patient_id}")
    return dates


def validate_visit_date(value: Any, today: Optional[date] = None) -> date:
    """Visit date must be present, parseable and not in the future."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError({"visit_date": "Visit date is required"})

    visit = to_calendar_date(value)
    if visit is None:
        raise ValidationError({"visit_date": "Visit date must be a valid date (YYYY-MM-DD)"})

    today = today or date.today()
    if visit > today:
        raise ValidationError({"visit_date": "Visit date cannot be in the future"})
    return visit


def ensure_no_conflict(existing_dates: Iterable[date], visit: date, label: str) -> None:
    if has_conflict(existing_dates, visit):
        raise ValidationError({
            "visit_date": f"A {label} record already exists for {visit.isoformat()}. Please select a different date."
        })


def _parse_measurement(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def validate_measurements(
    height_cm: Any,
    weight_kg: Any,
    bounds: MeasurementBounds = DEFAULT_BOUNDS,
) -> tuple[float, float]:
    """
    Validate height and weight for a vitals submission.

    Both must be finite numbers greater than zero and inside the clinical
    bounds. Every failing field is reported at once.

    Returns:
        (height_cm, weight_kg) as floats
    """
    errors = {}

    height = _parse_measurement(height_cm)
    if height is None or height <= 0:
        errors["height_cm"] = "Please enter a valid height"
    elif not bounds.height_min_cm <= height <= bounds.height_max_cm:
        errors["height_cm"] = (
            f"Height must be between {bounds.height_min_cm:g}cm and {bounds.height_max_cm:g}cm"
        )

    weight = _parse_measurement(weight_kg)
    if weight is None or weight <= 0:
        errors["weight_kg"] = "Please enter a valid weight"
    elif not bounds.weight_min_kg <= weight <= bounds.weight_max_kg:
        errors["weight_kg"] = (
            f"Weight must be between {bounds.weight_min_kg:g}kg and {bounds.weight_max_kg:g}kg"
        )

    if errors:
        raise ValidationError(errors)
    return height, weight
