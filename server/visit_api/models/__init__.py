"""Pydantic models for visit API requests and responses."""
from .patient import PatientCreate, PatientOut
from .vitals import VitalsCreate, VitalsOut, VitalsResult, WorkflowStepOut
from .assessment import (
    AssessmentOut,
    AssessmentResult,
    GeneralAssessmentCreate,
    OverweightAssessmentCreate,
)
from .summary import PatientDetailOut, PatientSummaryOut
from .errors import ErrorResponse

__all__ = [
    "PatientCreate",
    "PatientOut",
    "VitalsCreate",
    "VitalsOut",
    "VitalsResult",
    "WorkflowStepOut",
    "AssessmentOut",
    "AssessmentResult",
    "GeneralAssessmentCreate",
    "OverweightAssessmentCreate",
    "PatientDetailOut",
    "PatientSummaryOut",
    "ErrorResponse",
]
