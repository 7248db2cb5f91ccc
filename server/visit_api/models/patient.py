"""Patient data models."""
from datetime import date
from pydantic import BaseModel, ConfigDict
from typing import Optional


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


class PatientCreate(BaseModel):
    """Registration form submission.

    Fields are optional here so missing values reach the presence checks
    and come back as field errors.
    """

    patient_number: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    middle_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    registration_date: Optional[str] = None


class PatientOut(BaseModel):
    """Read-only patient projection."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, alias_generator=to_camel)

    id: str
    patient_id: str
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: str
    registration_date: Optional[date] = None
    age: int = 0
