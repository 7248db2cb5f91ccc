"""Clinical Visit API - FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .backend import create_backend
from .config import get_settings
from .errors import register_exception_handlers
from .routes import assessments, patients, vitals

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="[%(asctime)s] %(levelname)s - %(name)s - %(message)s"
)
logger = logging.getLogger("visit_api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open one backend client for the app and close it on shutdown."""
    app.state.backend = create_backend(settings)
    logger.info("Starting Clinical Visit API")
    try:
        yield
    finally:
        await app.state.backend.aclose()


app = FastAPI(
    title="Clinical Visit API",
    description="Patient registration, vitals, BMI-gated assessments and patient summaries",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(patients.router)
app.include_router(vitals.router)
app.include_router(assessments.router)


@app.get("/health")
async def health_check():
    """Health check endpoint for the API."""
    return {"status": "healthy", "service": "visit-api"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "server.visit_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
