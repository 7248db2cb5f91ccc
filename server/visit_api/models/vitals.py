"""Vitals data models."""
from datetime import date
from pydantic import BaseModel, ConfigDict
from typing import Optional, Union

from visit_workflow.bmi import BmiCategory
from visit_workflow.records import AssessmentType
from visit_workflow.workflow import WorkflowState

from .patient import to_camel


class VitalsCreate(BaseModel):
    """Vitals form submission. Numbers may arrive as strings from form inputs."""

    visit_date: Optional[str] = None
    height_cm: Union[float, str, None] = None
    weight_kg: Union[float, str, None] = None


class VitalsOut(BaseModel):
    """Recorded height/weight with derived BMI."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, alias_generator=to_camel)

    id: Optional[str] = None
    patient_id: Optional[str] = None
    visit_date: Optional[date] = None
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    bmi: Optional[float] = None
    bmi_status: Optional[BmiCategory] = None


class WorkflowStepOut(BaseModel):
    """Workflow state and the assessment the patient must get next."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, alias_generator=to_camel)

    state: WorkflowState
    required_assessment: Optional[AssessmentType] = None
    bmi: Optional[float] = None
    bmi_status: Optional[BmiCategory] = None
    vitals_date: Optional[date] = None


class VitalsResult(BaseModel):
    """Saved vitals plus where to route the user next."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, alias_generator=to_camel)

    vitals: VitalsOut
    next_step: WorkflowStepOut
