"""Application configuration loaded from environment variables."""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

from visit_workflow.visit_guard import MeasurementBounds


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_prefix="VISIT_", env_file=".env", extra="ignore")

    # Records backend
    backend_base_url: str = "http://localhost:8000/api"
    backend_timeout: float = 10.0

    # Vitals entry bounds
    height_min_cm: float = 50.0
    height_max_cm: float = 250.0
    weight_min_kg: float = 2.0
    weight_max_kg: float = 300.0

    @property
    def measurement_bounds(self) -> MeasurementBounds:
        return MeasurementBounds(
            height_min_cm=self.height_min_cm,
            height_max_cm=self.height_max_cm,
            weight_min_kg=self.weight_min_kg,
            weight_max_kg=self.weight_max_kg,
        )

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8083
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
