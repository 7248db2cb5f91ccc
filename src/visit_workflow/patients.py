"""Patient projection built from backend patient records."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from .records import to_calendar_date

GENDER_LABELS = {"M": "Male", "F": "Female", "O": "Other"}


def format_gender(gender: Optional[str]) -> str:
    """Display label for a backend gender code."""
    if not gender:
        return "Unknown"
    return GENDER_LABELS.get(gender.upper(), gender)


def calculate_age(date_of_birth: Any, today: Optional[date] = None) -> int:
    """Whole years between date of birth and today (0 when unknown)."""
    born = to_calendar_date(date_of_birth)
    if born is None:
        return 0
    today = today or date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


@dataclass(frozen=True)
class Patient:
    """Read-only projection of a backend patient."""

    id: str
    patient_id: str
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: str = "Unknown"
    registration_date: Optional[date] = None
    age: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_raw(cls, raw: dict, today: Optional[date] = None) -> "Patient":
        """Project a backend patient record.

        The human-facing id falls back to "PAT" plus the first eight
        characters of the backend id, and the registration date falls back
        to the creation timestamp.
        """
        backend_id = str(raw["id"])
        patient_id = raw.get("patient_id") or raw.get("patient_number") or f"PAT{backend_id[:8].upper()}"

        age = raw.get("age")
        if not isinstance(age, int) or isinstance(age, bool):
            age = calculate_age(raw.get("date_of_birth"), today=today)

        return cls(
            id=backend_id,
            patient_id=str(patient_id),
            first_name=raw.get("first_name") or "",
            last_name=raw.get("last_name") or "",
            middle_name=raw.get("middle_name") or None,
            date_of_birth=to_calendar_date(raw.get("date_of_birth")),
            gender=format_gender(raw.get("gender")),
            registration_date=to_calendar_date(raw.get("registration_date") or raw.get("created_at")),
            age=age,
        )


def parse_patients(records: list, today: Optional[date] = None) -> list[Patient]:
    """Project every usable patient record; records without an id are skipped."""
    return [
        Patient.from_raw(r, today=today)
        for r in records
        if isinstance(r, dict) and r.get("id") is not None
    ]
