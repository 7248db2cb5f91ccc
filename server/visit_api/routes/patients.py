"""Patient listing, registration and detail routes."""
from fastapi import APIRouter, Depends

from visit_workflow.aggregator import build_patient_detail, list_patient_summaries
from visit_workflow.backend import BackendClient
from visit_workflow.service import VisitService

from ..backend import get_backend, get_visit_service
from ..models.patient import PatientCreate, PatientOut
from ..models.summary import PatientDetailOut, PatientSummaryOut

router = APIRouter(prefix="/api/patients", tags=["Patients"])


@router.get("", response_model=list[PatientSummaryOut])
async def list_patients(backend: BackendClient = Depends(get_backend)):
    """
    Patient listing with latest BMI, BMI status and latest assessment.

    Rebuilt from the backend on every call. A patient whose vitals or
    assessments cannot be read is still listed, with those fields empty.
    """
    summaries = await list_patient_summaries(backend)
    return [PatientSummaryOut.model_validate(s) for s in summaries]


@router.post("", response_model=PatientOut, status_code=201)
async def register_patient(
    body: PatientCreate,
    service: VisitService = Depends(get_visit_service),
):
    """Register a new patient. The next step is recording vitals."""
    patient = await service.register_patient(body.model_dump())
    return PatientOut.model_validate(patient)


@router.get("/{patient_id}", response_model=PatientDetailOut)
async def get_patient_detail(patient_id: str, backend: BackendClient = Depends(get_backend)):
    """Patient detail: vitals and assessment history plus the current workflow state."""
    detail = await build_patient_detail(backend, patient_id)
    return PatientDetailOut.model_validate(detail)
