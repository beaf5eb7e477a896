"""Environment-based configuration for the image labeler."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Application settings loaded from IMAGELABELER_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="IMAGELABELER_",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8082
    log_level: str = "INFO"

    # Vision service
    aws_region: str = "ap-southeast-2"
    max_labels: int = Field(default=15, ge=1, le=1000)
    min_confidence: float = Field(default=35.0, ge=0.0, le=100.0)

    # Image input limits (Rekognition accepts at most 5 MiB of inline bytes)
    max_image_bytes: int = Field(default=5_242_880, ge=1)
    fetch_timeout: float = Field(default=10.0, gt=0)

    # Threads for blocking SDK calls
    max_workers: int = Field(default=4, ge=1)

    # Web client
    label_endpoint: str = "http://127.0.0.1:8082/label"
    client_timeout: float = Field(default=60.0, gt=0)
    settle_delay: float = Field(default=0.3, ge=0)


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
