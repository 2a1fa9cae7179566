"""Application configuration."""

import os
from uuid import UUID

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    page_size: int = Field(default=10, ge=1)
    prefetch_threshold: int = Field(default=3, ge=0)
    cache_capacity: int = Field(default=20, ge=1)
    credit_increment: int = Field(default=1, ge=0)
    min_trait_value: int = 1
    max_trait_value: int = 4
    preload_timeout_seconds: float = Field(default=10, gt=0)
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_trait_range(self) -> "Settings":
        if self.min_trait_value > self.max_trait_value:
            raise ValueError("min_trait_value must not exceed max_trait_value")
        return self


def parse_voter_id(raw: str | None) -> UUID | None:
    """Parse the voter identity supplied by the auth layer."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if not cleaned:
        return None
    try:
        return UUID(cleaned)
    except ValueError:
        return None
