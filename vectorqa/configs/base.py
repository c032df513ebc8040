"""
Shared settings base for vectorqa.

Every settings section reads the same .env file and ignores unknown keys,
so one file can carry chunking, model, store and logging values side by side.

Dependencies: pydantic_settings
System role: Parent class of every vectorqa settings section
"""

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Settings fields common to the whole service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(
        default="vectorqa",
        description="Service name shown in the API title and health payload",
    )
    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level name",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept any case, reject names logging does not know."""
        name = value.strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown log level: {value}")
        return name
