"""Error taxonomy for the visit workflow.

Validation and eligibility errors are raised before any write reaches the
backend. Transport errors describe failed reads and are absorbed by the
aggregator and the visit date guard; write errors propagate to the caller.
"""
from typing import Optional


class VisitWorkflowError(Exception):
    """Base class for all visit workflow errors."""


class ValidationError(VisitWorkflowError):
    """One or more submitted fields are missing or invalid."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in self.errors.items()))


class EligibilityError(VisitWorkflowError):
    """The requested assessment form may not be opened for this patient."""

    NO_BMI_CONTEXT = "no_bmi_context"
    WRONG_ASSESSMENT = "wrong_assessment"

    def __init__(self, reason: str, message: str):
        self.reason = reason
        self.message = message
        super().__init__(message)


class TransportError(VisitWorkflowError):
    """A backend read failed (connection error, timeout or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None, timeout: bool = False):
        self.message = message
        self.status_code = status_code
        self.timeout = timeout
        super().__init__(message)


class WriteError(VisitWorkflowError):
    """A backend write failed. The record must not be assumed saved."""

    def __init__(self, message: str, status_code: Optional[int] = None, retryable: bool = True):
        self.message = message
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)


class PatientNotFoundError(VisitWorkflowError):
    """The backend has no patient with the requested id."""

    def __init__(self, patient_id: str):
        self.patient_id = patient_id
        super().__init__(f"Patient {patient_id} not found")
