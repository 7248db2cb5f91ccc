"""Vitals recording route."""
from fastapi import APIRouter, Depends

from visit_workflow.service import VisitService

from ..backend import get_visit_service
from ..models.vitals import VitalsCreate, VitalsResult

router = APIRouter(prefix="/api/patients", tags=["Vitals"])


@router.post("/{patient_id}/vitals", response_model=VitalsResult, status_code=201)
async def record_vitals(
    patient_id: str,
    body: VitalsCreate,
    service: VisitService = Depends(get_visit_service),
):
    """
    Record height and weight for a visit.

    Rejects out-of-range measurements, future dates and a second vitals
    record on the same date. On success the response names the assessment
    form the user must be routed to next.
    """
    outcome = await service.record_vitals(
        patient_id,
        visit_date=body.visit_date,
        height_cm=body.height_cm,
        weight_kg=body.weight_kg,
    )
    return VitalsResult.model_validate(outcome)
