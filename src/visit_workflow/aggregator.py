"""
Patient summary aggregator.

Builds listing and detail views by fanning out per-patient reads for
vitals and both assessment kinds, then folding the most recent record of
each into a summary. Results are plain values rebuilt on every call;
nothing is cached or shared between calls.

A failed sub-resource read only blanks the fields that depend on it, for
that patient alone.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Optional

from .backend import BackendClient
from .bmi import BmiCategory, classify_bmi
from .errors import TransportError
from .patients import Patient, parse_patients
from .records import (
    AssessmentRecord,
    AssessmentType,
    RecordKind,
    VitalsRecord,
    latest_record,
    newest_first,
    parse_assessments,
    parse_vitals,
)
from .workflow import WorkflowRouter, WorkflowStep

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatientSummary:
    """Patient projection plus its latest vitals and assessment."""

    id: str
    patient_id: str
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: str = "Unknown"
    registration_date: Optional[date] = None
    age: int = 0
    latest_bmi: Optional[float] = None
    latest_bmi_status: Optional[BmiCategory] = None
    latest_vitals_date: Optional[date] = None
    latest_assessment_date: Optional[date] = None
    latest_assessment_type: Optional[AssessmentType] = None


@dataclass(frozen=True)
class PatientDetail:
    """Full history view for one patient."""

    summary: PatientSummary
    workflow: WorkflowStep
    vitals_history: list[VitalsRecord] = field(default_factory=list)
    assessment_history: list[AssessmentRecord] = field(default_factory=list)

    @property
    def total_vitals(self) -> int:
        return len(self.vitals_history)

    @property
    def total_assessments(self) -> int:
        return len(self.assessment_history)


def latest_assessment_of(
    overweight: list[AssessmentRecord],
    general: list[AssessmentRecord],
) -> Optional[AssessmentRecord]:
    """Most recent assessment across both kinds; an exact tie goes to Overweight."""
    candidates = [r for r in (latest_record(overweight), latest_record(general)) if r is not None]
    return latest_record(candidates)


def summarize(
    patient: Patient,
    vitals: Optional[list],
    general: Optional[list],
    overweight: Optional[list],
) -> PatientSummary:
    """
    Fold raw per-kind record lists into a summary.

    None for a list means the read failed; the dependent fields stay empty.
    """
    latest_vitals = latest_record(parse_vitals(vitals or []))
    latest_assessment = latest_assessment_of(
        parse_assessments(overweight or [], AssessmentType.OVERWEIGHT),
        parse_assessments(general or [], AssessmentType.GENERAL),
    )

    bmi = latest_vitals.bmi if latest_vitals else None
    return PatientSummary(
        **asdict(patient),
        latest_bmi=bmi,
        latest_bmi_status=classify_bmi(bmi) if bmi is not None else None,
        latest_vitals_date=latest_vitals.visit_date if latest_vitals else None,
        latest_assessment_date=latest_assessment.visit_date if latest_assessment else None,
        latest_assessment_type=latest_assessment.assessment_type if latest_assessment else None,
    )


async def _fetch_or_none(backend: BackendClient, kind: RecordKind, patient: Patient) -> Optional[list]:
    try:
        return await backend.list_records(kind, patient.id)
    except TransportError as e:
        logger.warning(f"[AGGREGATE] {kind.value} unavailable for {patient.patient_id}: {e.message}")
        return None


async def _fetch_all_kinds(backend: BackendClient, patient: Patient) -> tuple:
    return await asyncio.gather(
        _fetch_or_none(backend, RecordKind.VITALS, patient),
        _fetch_or_none(backend, RecordKind.GENERAL_ASSESSMENT, patient),
        _fetch_or_none(backend, RecordKind.OVERWEIGHT_ASSESSMENT, patient),
    )


async def build_summary(backend: BackendClient, patient: Patient) -> PatientSummary:
    """Fetch one patient's vitals and assessments concurrently and summarize them."""
    vitals, general, overweight = await _fetch_all_kinds(backend, patient)
    return summarize(patient, vitals, general, overweight)


async def build_summaries(backend: BackendClient, patients: list[Patient]) -> list[PatientSummary]:
    """
    Build summaries for a patient collection.

    Patients are processed concurrently; the result keeps the input order
    regardless of which reads finish first.
    """
    summaries = await asyncio.gather(*(build_summary(backend, p) for p in patients))
    logger.info(f"[AGGREGATE] Built {len(summaries)} patient summaries")
    return list(summaries)


async def list_patient_summaries(backend: BackendClient, today: Optional[date] = None) -> list[PatientSummary]:
    """Listing view: every patient with its latest BMI and assessment."""
    try:
        raw_patients = await backend.list_patients()
    except TransportError as e:
        logger.error(f"[AGGREGATE] Patient list unavailable: {e.message}")
        return []

    patients = parse_patients(raw_patients, today=today)
    logger.debug(f"[AGGREGATE] Extracted {len(patients)} patients")
    return await build_summaries(backend, patients)


async def build_patient_detail(
    backend: BackendClient,
    patient_id: str,
    router: Optional[WorkflowRouter] = None,
    today: Optional[date] = None,
) -> PatientDetail:
    """
    Detail view: summary, full histories (newest first) and workflow state.

    Raises:
        PatientNotFoundError: unknown patient id
        TransportError: the patient record itself could not be read
    """
    router = router or WorkflowRouter()
    patient = Patient.from_raw(await backend.get_patient(patient_id), today=today)

    vitals, general, overweight = await _fetch_all_kinds(backend, patient)
    vitals_history = newest_first(parse_vitals(vitals or []))
    assessment_history = newest_first(
        parse_assessments(overweight or [], AssessmentType.OVERWEIGHT)
        + parse_assessments(general or [], AssessmentType.GENERAL)
    )

    summary = summarize(patient, vitals, general, overweight)
    latest_vitals = vitals_history[0] if vitals_history else None
    latest_assessment = latest_assessment_of(
        [a for a in assessment_history if a.assessment_type == AssessmentType.OVERWEIGHT],
        [a for a in assessment_history if a.assessment_type == AssessmentType.GENERAL],
    )

    return PatientDetail(
        summary=summary,
        workflow=router.state_for(latest_vitals, latest_assessment),
        vitals_history=vitals_history,
        assessment_history=assessment_history,
    )
