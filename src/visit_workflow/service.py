"""
Visit service.

Submit flows for the registration, vitals and assessment forms. Each flow
validates synchronously, runs the visit date guard for its record kind and
only then writes. Writes are attempted once; a WriteError goes back to the
caller untouched.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from .backend import BackendClient
from .bmi import BmiResult, compute_bmi
from .errors import EligibilityError, TransportError, ValidationError, WriteError
from .patients import Patient
from .records import (
    AssessmentRecord,
    AssessmentType,
    RecordKind,
    VitalsRecord,
    latest_record,
    parse_vitals,
)
from .visit_guard import (
    DEFAULT_BOUNDS,
    MeasurementBounds,
    ensure_no_conflict,
    load_existing_dates,
    validate_measurements,
    validate_visit_date,
)
from .workflow import WorkflowRouter, WorkflowStep

logger = logging.getLogger(__name__)

REQUIRED_PATIENT_FIELDS = ("patient_number", "first_name", "last_name", "date_of_birth", "gender")
HEALTH_CHOICES = ("Good", "Poor")
YES_NO = ("Yes", "No")


@dataclass(frozen=True)
class VitalsOutcome:
    """Saved vitals plus the next workflow step."""

    vitals: VitalsRecord
    bmi: BmiResult
    next_step: WorkflowStep


@dataclass(frozen=True)
class AssessmentOutcome:
    """Saved assessment plus the resulting workflow step."""

    assessment: AssessmentRecord
    next_step: WorkflowStep


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _require_patient_id(patient_id: Optional[str]) -> str:
    if _blank(patient_id):
        raise ValidationError({"patient": "Patient data not found"})
    return str(patient_id).strip()


class VisitService:
    """Registration, vitals and assessment submit flows against one backend."""

    def __init__(
        self,
        backend: BackendClient,
        bounds: MeasurementBounds = DEFAULT_BOUNDS,
        router: Optional[WorkflowRouter] = None,
    ):
        self.backend = backend
        self.bounds = bounds
        self.router = router or WorkflowRouter()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    async def register_patient(self, data: dict, today: Optional[date] = None) -> Patient:
        """
        Register a patient after presence checks on the required fields.

        Raises:
            ValidationError: a required field is missing
            WriteError: the backend rejected or did not receive the write
        """
        missing = {name: "This field is required" for name in REQUIRED_PATIENT_FIELDS if _blank(data.get(name))}
        if missing:
            raise ValidationError(missing)

        payload = {
            "patient_number": data["patient_number"],
            "first_name": data["first_name"],
            "last_name": data["last_name"],
            "middle_name": data.get("middle_name") or None,
            "date_of_birth": str(data["date_of_birth"]),
            "gender": data["gender"],
            "registration_date": str(data.get("registration_date") or (today or date.today()).isoformat()),
        }

        try:
            created = await self.backend.create_patient(payload)
        except WriteError as e:
            if e.status_code is not None and e.status_code < 500 and "patient_number" in e.message:
                raise WriteError(
                    "Patient number already exists. Please use a different number.",
                    status_code=e.status_code,
                    retryable=False,
                ) from e
            raise

        if created.get("id") is None:
            raise WriteError("The backend did not return an id for the new patient", retryable=False)

        logger.info(f"[REGISTER] Created patient {payload['patient_number']}")
        return Patient.from_raw({**payload, **created}, today=today)

    # ------------------------------------------------------------------
    # Vitals
    # ------------------------------------------------------------------

    async def record_vitals(
        self,
        patient_id: Optional[str],
        visit_date: Any,
        height_cm: Any,
        weight_kg: Any,
        today: Optional[date] = None,
    ) -> VitalsOutcome:
        """
        Record vitals and decide which assessment comes next.

        Raises:
            ValidationError: bad measurements, bad/future date, or vitals
                already recorded on that date
            WriteError: the backend write failed
        """
        patient_id = _require_patient_id(patient_id)

        errors = {}
        height = weight = visit = None
        try:
            height, weight = validate_measurements(height_cm, weight_kg, self.bounds)
        except ValidationError as e:
            errors.update(e.errors)
        try:
            visit = validate_visit_date(visit_date, today=today)
        except ValidationError as e:
            errors.update(e.errors)
        if errors:
            raise ValidationError(errors)

        existing = await load_existing_dates(self.backend, patient_id, RecordKind.VITALS)
        ensure_no_conflict(existing, visit, "vitals")

        bmi = compute_bmi(height, weight)
        payload = {
            "patient_id": patient_id,
            "visit_date": visit.isoformat(),
            "height_cm": height,
            "weight_kg": weight,
            "bmi": bmi.value,
        }
        created = await self.backend.create_record(RecordKind.VITALS, payload)
        vitals = VitalsRecord.from_raw({**payload, **created})
        logger.info(f"[VITALS] Saved vitals for {patient_id} on {visit}: BMI {bmi.value} ({bmi.category.value})")

        return VitalsOutcome(vitals=vitals, bmi=bmi, next_step=self.router.after_vitals(vitals))

    # ------------------------------------------------------------------
    # Assessments
    # ------------------------------------------------------------------

    async def latest_vitals(self, patient_id: str) -> Optional[VitalsRecord]:
        """Most recent vitals record, freshly read from the backend.

        Raises:
            EligibilityError: the vitals could not be read, so there is no
                BMI context to evaluate eligibility against
        """
        try:
            records = await self.backend.list_records(RecordKind.VITALS, patient_id)
        except TransportError as e:
            logger.warning(f"[ASSESSMENT] No BMI context for {patient_id}: {e.message}")
            raise EligibilityError(
                EligibilityError.NO_BMI_CONTEXT,
                "The patient's latest vitals could not be loaded, so the required assessment is unknown.",
            ) from e
        return latest_record(parse_vitals(records))

    async def open_assessment(self, patient_id: Optional[str], assessment_type: AssessmentType) -> WorkflowStep:
        """Eligibility check for opening an assessment form."""
        patient_id = _require_patient_id(patient_id)
        return self.router.open_assessment(assessment_type, await self.latest_vitals(patient_id))

    def _validate_assessment(self, assessment_type: AssessmentType, data: dict, today: Optional[date]) -> tuple[date, dict]:
        errors = {}
        visit = None
        try:
            visit = validate_visit_date(data.get("visit_date"), today=today)
        except ValidationError as e:
            errors.update(e.errors)

        general_health = (data.get("general_health") or "").strip()
        if not general_health:
            errors["general_health"] = "General health assessment is required"
        elif general_health not in HEALTH_CHOICES:
            errors["general_health"] = "General health must be Good or Poor"

        if assessment_type == AssessmentType.GENERAL:
            answer_field = "using_drugs"
            answer = (data.get("using_drugs") or data.get("currently_using_drugs") or "").strip()
            missing_message = "Please specify if the patient is using any drugs"
        else:
            answer_field = "been_on_diet"
            answer = (data.get("been_on_diet") or "").strip()
            missing_message = "Please specify if the patient has been on a diet"

        if not answer:
            errors[answer_field] = missing_message
        elif answer not in YES_NO:
            errors[answer_field] = "Answer must be Yes or No"

        if errors:
            raise ValidationError(errors)

        fields = {
            "general_health": general_health,
            answer_field: answer,
            "comments": (data.get("comments") or "").strip(),
        }
        return visit, fields

    async def record_assessment(
        self,
        patient_id: Optional[str],
        assessment_type: AssessmentType,
        data: dict,
        today: Optional[date] = None,
    ) -> AssessmentOutcome:
        """
        Record a General or Overweight assessment.

        Order: field validation, eligibility against the latest vitals,
        duplicate-date check for this assessment kind, then the write.
        Bad fields are reported before any backend call.

        Raises:
            EligibilityError: wrong assessment type or no BMI context
            ValidationError: missing/invalid fields or date conflict
            WriteError: the backend write failed
        """
        patient_id = _require_patient_id(patient_id)
        visit, fields = self._validate_assessment(assessment_type, data, today)

        latest = await self.latest_vitals(patient_id)
        self.router.open_assessment(assessment_type, latest)

        kind = RecordKind.for_assessment(assessment_type)
        existing = await load_existing_dates(self.backend, patient_id, kind)
        ensure_no_conflict(existing, visit, f"{assessment_type.value.lower()} assessment")

        payload = {"patient_id": patient_id, "visit_date": visit.isoformat(), **fields}
        created = await self.backend.create_record(kind, payload)
        assessment = AssessmentRecord.from_raw({**payload, **created}, assessment_type)
        logger.info(f"[ASSESSMENT] Saved {assessment_type.value} assessment for {patient_id} on {visit}")

        return AssessmentOutcome(assessment=assessment, next_step=self.router.after_assessment(latest))
