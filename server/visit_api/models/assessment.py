"""Assessment data models."""
from datetime import date
from pydantic import AliasChoices, BaseModel, Field, ConfigDict
from typing import Optional

from visit_workflow.records import AssessmentType

from .patient import to_camel
from .vitals import WorkflowStepOut


class GeneralAssessmentCreate(BaseModel):
    """General assessment form submission (BMI below 25)."""

    visit_date: Optional[str] = None
    general_health: Optional[str] = None
    using_drugs: Optional[str] = None
    currently_using_drugs: Optional[str] = None
    comments: Optional[str] = ""


class OverweightAssessmentCreate(BaseModel):
    """Overweight assessment form submission (BMI 25 and above)."""

    visit_date: Optional[str] = None
    general_health: Optional[str] = None
    been_on_diet: Optional[str] = None
    comments: Optional[str] = ""


class AssessmentOut(BaseModel):
    """Recorded assessment of either variant."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, alias_generator=to_camel)

    id: Optional[str] = None
    patient_id: Optional[str] = None
    visit_date: Optional[date] = None
    assessment_type: AssessmentType = Field(
        validation_alias=AliasChoices("type", "assessmentType", "assessment_type"),
        serialization_alias="type",
    )
    general_health: Optional[str] = None
    using_drugs: Optional[str] = None
    been_on_diet: Optional[str] = None
    comments: str = ""


class AssessmentResult(BaseModel):
    """Saved assessment and the resulting workflow state."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, alias_generator=to_camel)

    assessment: AssessmentOut
    next_step: WorkflowStepOut
