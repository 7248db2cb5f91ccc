"""API route modules."""
from .patients import router as patients_router
from .vitals import router as vitals_router
from .assessments import router as assessments_router

__all__ = [
    "patients_router",
    "vitals_router",
    "assessments_router",
]
