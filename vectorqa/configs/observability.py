"""
Observability configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Logging configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="OBSERVABILITY_",
        case_sensitive=False,
        extra="ignore",
    )

    include_correlation_id: bool = Field(
        default=True,
        description="Prefix log lines with the request correlation ID",
    )
    quiet_loggers: list[str] = Field(
        default=["httpx", "httpcore", "urllib3", "aiosqlite", "google_genai"],
        description="Third-party loggers reduced to WARNING",
    )
