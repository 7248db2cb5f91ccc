"""
Workflow Router.

Per-patient visit state machine keyed off the latest vitals record:

    NoVitals --record vitals--> VitalsRecorded --open form--> AssessmentPending
    AssessmentPending --submit--> AssessmentRecorded
    any state --record vitals--> VitalsRecorded (under the new BMI)

The latest BMI category decides which assessment form is required; the
other form is refused with an EligibilityError instead of a redirect.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from .bmi import BmiCategory, classify_bmi
from .errors import EligibilityError
from .records import AssessmentRecord, AssessmentType, VitalsRecord

logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    """Visit workflow states."""

    NO_VITALS = "NoVitals"
    VITALS_RECORDED = "VitalsRecorded"
    ASSESSMENT_PENDING = "AssessmentPending"
    ASSESSMENT_RECORDED = "AssessmentRecorded"


@dataclass(frozen=True)
class WorkflowStep:
    """Where a patient's visit stands and what has to happen next."""

    state: WorkflowState
    required_assessment: Optional[AssessmentType] = None
    bmi: Optional[float] = None
    bmi_status: Optional[BmiCategory] = None
    vitals_date: Optional[date] = None


def required_assessment(category: BmiCategory) -> AssessmentType:
    """Overweight BMI requires the Overweight assessment, anything else the General one."""
    if category == BmiCategory.OVERWEIGHT:
        return AssessmentType.OVERWEIGHT
    return AssessmentType.GENERAL


class WorkflowRouter:
    """Decides the next screen after vitals and gates the assessment forms."""

    def _vitals_step(self, state: WorkflowState, vitals: VitalsRecord) -> WorkflowStep:
        category = classify_bmi(vitals.bmi)
        return WorkflowStep(
            state=state,
            required_assessment=required_assessment(category),
            bmi=vitals.bmi,
            bmi_status=category,
            vitals_date=vitals.visit_date,
        )

    def after_vitals(self, vitals: VitalsRecord) -> WorkflowStep:
        """Route to the required assessment after a successful vitals write."""
        if vitals.bmi is None:
            return WorkflowStep(state=WorkflowState.NO_VITALS)
        step = self._vitals_step(WorkflowState.VITALS_RECORDED, vitals)
        logger.info(
            f"[WORKFLOW] BMI {step.bmi} ({step.bmi_status.value}) -> "
            f"{step.required_assessment.value} assessment"
        )
        return step

    def open_assessment(
        self,
        assessment_type: AssessmentType,
        latest_vitals: Optional[VitalsRecord],
    ) -> WorkflowStep:
        """
        Check that an assessment form may be opened.

        Eligibility is always evaluated against the most recent vitals
        record, never against the vitals that happened to lead to the form.

        Raises:
            EligibilityError: no usable BMI context, or the other
                assessment type is required
        """
        if latest_vitals is None or latest_vitals.bmi is None:
            raise EligibilityError(
                EligibilityError.NO_BMI_CONTEXT,
                "No BMI recorded for this patient. Record vitals before opening an assessment.",
            )

        step = self._vitals_step(WorkflowState.ASSESSMENT_PENDING, latest_vitals)
        if step.required_assessment != assessment_type:
            raise EligibilityError(
                EligibilityError.WRONG_ASSESSMENT,
                f"{assessment_type.value} assessment is not available: the latest BMI of "
                f"{step.bmi:.1f} ({step.bmi_status.value}) requires the "
                f"{step.required_assessment.value} assessment.",
            )
        return step

    def after_assessment(self, latest_vitals: VitalsRecord) -> WorkflowStep:
        return self._vitals_step(WorkflowState.ASSESSMENT_RECORDED, latest_vitals)

    def state_for(
        self,
        latest_vitals: Optional[VitalsRecord],
        latest_assessment: Optional[AssessmentRecord],
    ) -> WorkflowStep:
        """Derive the dashboard state from the latest vitals and assessment."""
        if latest_vitals is None or latest_vitals.bmi is None:
            return WorkflowStep(state=WorkflowState.NO_VITALS)

        if (
            latest_assessment is not None
            and latest_assessment.visit_date is not None
            and latest_vitals.visit_date is not None
            and latest_assessment.visit_date >= latest_vitals.visit_date
        ):
            return self.after_assessment(latest_vitals)

        return self._vitals_step(WorkflowState.VITALS_RECORDED, latest_vitals)
