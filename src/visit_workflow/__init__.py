"""
Visit workflow core.

BMI classification, response normalization, the visit date guard, the
assessment workflow router and the patient summary aggregator used by the
visit API.
"""

from .aggregator import (
    PatientDetail,
    PatientSummary,
    build_patient_detail,
    build_summaries,
    build_summary,
    list_patient_summaries,
)
from .backend import BackendClient
from .bmi import BmiCategory, BmiResult, classify_bmi, compute_bmi
from .errors import (
    EligibilityError,
    PatientNotFoundError,
    TransportError,
    ValidationError,
    VisitWorkflowError,
    WriteError,
)
from .normalizer import extract_records
from .patients import Patient
from .records import AssessmentRecord, AssessmentType, RecordKind, VitalsRecord
from .service import AssessmentOutcome, VisitService, VitalsOutcome
from .visit_guard import MeasurementBounds, has_conflict, load_existing_dates
from .workflow import WorkflowRouter, WorkflowState, WorkflowStep

__all__ = [
    "AssessmentOutcome",
    "AssessmentRecord",
    "AssessmentType",
    "BackendClient",
    "BmiCategory",
    "BmiResult",
    "EligibilityError",
    "MeasurementBounds",
    "Patient",
    "PatientDetail",
    "PatientNotFoundError",
    "PatientSummary",
    "RecordKind",
    "TransportError",
    "ValidationError",
    "VisitService",
    "VisitWorkflowError",
    "VitalsOutcome",
    "VitalsRecord",
    "WorkflowRouter",
    "WorkflowState",
    "WorkflowStep",
    "WriteError",
    "build_patient_detail",
    "build_summaries",
    "build_summary",
    "classify_bmi",
    "compute_bmi",
    "extract_records",
    "has_conflict",
    "list_patient_summaries",
    "load_existing_dates",
]
