"""
Clinical record types and date helpers.

Backend records arrive as loosely shaped dicts: numbers may be strings,
the patient reference may be "patient_id" or "patient", and the visit date
may be missing in favour of "created_at". The helpers here turn those dicts
into typed records and pick the most recent one by explicit date comparison.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional, TypeVar

from .bmi import BmiCategory, classify_bmi, compute_bmi, parse_bmi


class AssessmentType(str, Enum):
    """Assessment variant tag."""

    GENERAL = "General"
    OVERWEIGHT = "Overweight"


class RecordKind(str, Enum):
    """Kinds of per-patient records held by the backend."""

    VITALS = "Vitals"
    GENERAL_ASSESSMENT = "GeneralAssessment"
    OVERWEIGHT_ASSESSMENT = "OverweightAssessment"

    @property
    def assessment_type(self) -> Optional[AssessmentType]:
        return _KIND_TO_TYPE.get(self)

    @classmethod
    def for_assessment(cls, assessment_type: AssessmentType) -> "RecordKind":
        if assessment_type == AssessmentType.OVERWEIGHT:
            return cls.OVERWEIGHT_ASSESSMENT
        return cls.GENERAL_ASSESSMENT


_KIND_TO_TYPE = {
    RecordKind.GENERAL_ASSESSMENT: AssessmentType.GENERAL,
    RecordKind.OVERWEIGHT_ASSESSMENT: AssessmentType.OVERWEIGHT,
}


# ============================================================================
# Date helpers
# ============================================================================


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO date or datetime into a naive datetime.

    Timezone-aware values are converted to UTC before the tzinfo is dropped,
    so date-only and timestamped values compare on one scale.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_calendar_date(value: Any) -> Optional[date]:
    """Reduce an ISO date/datetime to its calendar date (time of day dropped)."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    parsed = parse_timestamp(value)
    return parsed.date() if parsed else None


def record_visit_value(raw: dict) -> Any:
    """The record's visit date, falling back to its creation timestamp."""
    return raw.get("visit_date") or raw.get("created_at")


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


# ============================================================================
# Typed records
# ============================================================================


@dataclass(frozen=True)
class VitalsRecord:
    """Height/weight measurement for one visit."""

    id: Optional[str]
    patient_id: Optional[str]
    visit_date: Optional[date]
    height_cm: Optional[float]
    weight_kg: Optional[float]
    bmi: Optional[float]
    created_at: Optional[datetime] = None
    recorded_at: Optional[datetime] = None

    @property
    def bmi_status(self) -> Optional[BmiCategory]:
        return classify_bmi(self.bmi) if self.bmi is not None else None

    @classmethod
    def from_raw(cls, raw: dict) -> "VitalsRecord":
        height = _to_float(raw.get("height_cm"))
        weight = _to_float(raw.get("weight_kg"))

        bmi = parse_bmi(raw.get("bmi"))
        if bmi is None and height and weight:
            # Re-derive when the backend did not store a BMI
            result = compute_bmi(height, weight)
            bmi = result.value if result.is_valid else None

        record_id = raw.get("id")
        patient = raw.get("patient_id") or raw.get("patient")
        return cls(
            id=str(record_id) if record_id is not None else None,
            patient_id=str(patient) if patient is not None else None,
            visit_date=to_calendar_date(record_visit_value(raw)),
            height_cm=height,
            weight_kg=weight,
            bmi=bmi,
            created_at=parse_timestamp(raw.get("created_at")),
            recorded_at=parse_timestamp(record_visit_value(raw)),
        )


@dataclass(frozen=True)
class AssessmentRecord:
    """General or Overweight follow-up assessment for one visit."""

    id: Optional[str]
    patient_id: Optional[str]
    visit_date: Optional[date]
    assessment_type: AssessmentType
    general_health: Optional[str] = None
    using_drugs: Optional[str] = None
    been_on_diet: Optional[str] = None
    comments: str = ""
    created_at: Optional[datetime] = None
    recorded_at: Optional[datetime] = None

    @classmethod
    def from_raw(cls, raw: dict, assessment_type: AssessmentType) -> "AssessmentRecord":
        record_id = raw.get("id")
        patient = raw.get("patient_id") or raw.get("patient")
        is_general = assessment_type == AssessmentType.GENERAL
        return cls(
            id=str(record_id) if record_id is not None else None,
            patient_id=str(patient) if patient is not None else None,
            visit_date=to_calendar_date(record_visit_value(raw)),
            assessment_type=assessment_type,
            general_health=raw.get("general_health"),
            using_drugs=(raw.get("using_drugs") or raw.get("currently_using_drugs")) if is_general else None,
            been_on_diet=None if is_general else raw.get("been_on_diet"),
            comments=raw.get("comments") or "",
            created_at=parse_timestamp(raw.get("created_at")),
            recorded_at=parse_timestamp(record_visit_value(raw)),
        )


def parse_vitals(records: Iterable[Any]) -> list[VitalsRecord]:
    return [VitalsRecord.from_raw(r) for r in records if isinstance(r, dict)]


def parse_assessments(records: Iterable[Any], assessment_type: AssessmentType) -> list[AssessmentRecord]:
    return [AssessmentRecord.from_raw(r, assessment_type) for r in records if isinstance(r, dict)]


# ============================================================================
# Recency
# ============================================================================

R = TypeVar("R", VitalsRecord, AssessmentRecord)


def recency_key(record) -> tuple[datetime, datetime]:
    """Sort key: visit date (or creation time), then creation time.

    Undated records sort before everything else.
    """
    return (record.recorded_at or datetime.min, record.created_at or datetime.min)


def latest_record(records: Iterable[R]) -> Optional[R]:
    """Return the most recent record, or None for an empty collection."""
    records = list(records)
    if not records:
        return None
    return max(records, key=recency_key)


def newest_first(records: Iterable[R]) -> list[R]:
    return sorted(records, key=recency_key, reverse=True)
