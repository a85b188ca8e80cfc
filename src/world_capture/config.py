"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    records_table: str = "clone_records"
    assets_bucket: str = "clone-assets"
    gateway_base_url: str = "http://localhost:8000"
    wlt_api_key: str | None = None
    worldlabs_base_url: str = "https://api.worldlabs.ai/marble/v1"
    poll_interval_seconds: float = 5.0
    poll_backoff_factor: float = 1.0
    poll_max_interval_seconds: float = 30.0
    poll_timeout_seconds: float = 1800.0
    poll_max_attempts: int | None = None
    http_timeout_seconds: float = 30.0
    asset_timeout_seconds: float = 120.0
    capture_image_count: int = 16
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
