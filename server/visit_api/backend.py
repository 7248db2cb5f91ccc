"""Shared records-backend client and request dependencies."""
import logging

from fastapi import Depends, Request

from visit_workflow.backend import BackendClient
from visit_workflow.service import VisitService

from .config import Settings, get_settings

log = logging.getLogger(__name__)


def create_backend(settings: Settings) -> BackendClient:
    """Build the backend client used for the lifetime of the app."""
    log.info(f"Records backend: {settings.backend_base_url} (timeout {settings.backend_timeout}s)")
    return BackendClient(base_url=settings.backend_base_url, timeout=settings.backend_timeout)


def get_backend(request: Request) -> BackendClient:
    """The app-wide backend client created at startup."""
    return request.app.state.backend


def get_visit_service(
    backend: BackendClient = Depends(get_backend),
    settings: Settings = Depends(get_settings),
) -> VisitService:
    return VisitService(backend, bounds=settings.measurement_bounds)
