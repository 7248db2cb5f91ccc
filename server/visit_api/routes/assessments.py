"""Assessment form routes.

Which form a patient may use is decided by the BMI of their most recent
vitals: Overweight requires the overweight assessment, anything else the
general one. Requests for the other form are refused with 403.
"""
from fastapi import APIRouter, Depends, HTTPException

from visit_workflow.records import AssessmentType
from visit_workflow.service import VisitService

from ..backend import get_visit_service
from ..models.assessment import AssessmentResult, GeneralAssessmentCreate, OverweightAssessmentCreate
from ..models.vitals import WorkflowStepOut

router = APIRouter(prefix="/api/patients", tags=["Assessments"])

ASSESSMENT_PATHS = {
    "general": AssessmentType.GENERAL,
    "overweight": AssessmentType.OVERWEIGHT,
}


@router.get("/{patient_id}/assessments/{kind}", response_model=WorkflowStepOut)
async def open_assessment_form(
    patient_id: str,
    kind: str,
    service: VisitService = Depends(get_visit_service),
):
    """
    Open an assessment form.

    Returns the BMI context for the form, or 403 when the patient has no
    BMI yet or the latest BMI requires the other assessment.
    """
    if kind not in ASSESSMENT_PATHS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid assessment '{kind}'. Must be one of: {list(ASSESSMENT_PATHS.keys())}"
        )
    step = await service.open_assessment(patient_id, ASSESSMENT_PATHS[kind])
    return WorkflowStepOut.model_validate(step)


@router.post("/{patient_id}/assessments/general", response_model=AssessmentResult, status_code=201)
async def record_general_assessment(
    patient_id: str,
    body: GeneralAssessmentCreate,
    service: VisitService = Depends(get_visit_service),
):
    """Record a general assessment (latest BMI below 25)."""
    outcome = await service.record_assessment(patient_id, AssessmentType.GENERAL, body.model_dump())
    return AssessmentResult.model_validate(outcome)


@router.post("/{patient_id}/assessments/overweight", response_model=AssessmentResult, status_code=201)
async def record_overweight_assessment(
    patient_id: str,
    body: OverweightAssessmentCreate,
    service: VisitService = Depends(get_visit_service),
):
    """Record an overweight assessment (latest BMI 25 or above)."""
    outcome = await service.record_assessment(patient_id, AssessmentType.OVERWEIGHT, body.model_dump())
    return AssessmentResult.model_validate(outcome)
