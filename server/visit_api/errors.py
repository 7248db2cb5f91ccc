"""Exception handlers mapping visit workflow errors onto HTTP responses.

Validation errors are 422, eligibility errors 403 (access denied, not a
redirect), unknown patients 404 and backend failures 502.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from visit_workflow.errors import (
    EligibilityError,
    PatientNotFoundError,
    TransportError,
    ValidationError,
    WriteError,
)

from .models.errors import ErrorResponse

log = logging.getLogger(__name__)


def _respond(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _respond(422, ErrorResponse(error="validation", message=str(exc), errors=exc.errors))


async def eligibility_error_handler(request: Request, exc: EligibilityError) -> JSONResponse:
    log.info(f"[ELIGIBILITY] {request.url.path} denied: {exc.reason}")
    return _respond(403, ErrorResponse(error="eligibility", message=exc.message, reason=exc.reason))


async def not_found_handler(request: Request, exc: PatientNotFoundError) -> JSONResponse:
    return _respond(404, ErrorResponse(error="not_found", message=str(exc)))


async def transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
    log.error(f"[TRANSPORT] {request.url.path}: {exc.message}")
    return _respond(502, ErrorResponse(error="transport", message=exc.message, retryable=True))


async def write_error_handler(request: Request, exc: WriteError) -> JSONResponse:
    status_code = 502 if exc.retryable else 400
    return _respond(
        status_code,
        ErrorResponse(error="write", message=exc.message, retryable=exc.retryable),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(EligibilityError, eligibility_error_handler)
    app.add_exception_handler(PatientNotFoundError, not_found_handler)
    app.add_exception_handler(TransportError, transport_error_handler)
    app.add_exception_handler(WriteError, write_error_handler)
