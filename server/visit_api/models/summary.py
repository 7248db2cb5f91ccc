"""Patient summary and detail models."""
from datetime import date
from pydantic import BaseModel, ConfigDict
from typing import Optional

from visit_workflow.bmi import BmiCategory
from visit_workflow.records import AssessmentType

from .assessment import AssessmentOut
from .patient import PatientOut, to_camel
from .vitals import VitalsOut, WorkflowStepOut


class PatientSummaryOut(PatientOut):
    """Listing row: patient plus latest BMI and assessment."""

    latest_bmi: Optional[float] = None
    latest_bmi_status: Optional[BmiCategory] = None
    latest_vitals_date: Optional[date] = None
    latest_assessment_date: Optional[date] = None
    latest_assessment_type: Optional[AssessmentType] = None


class PatientDetailOut(BaseModel):
    """Patient detail page: summary, histories and workflow state."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, alias_generator=to_camel)

    summary: PatientSummaryOut
    workflow: WorkflowStepOut
    vitals_history: list[VitalsOut]
    assessment_history: list[AssessmentOut]
    total_vitals: int
    total_assessments: int
