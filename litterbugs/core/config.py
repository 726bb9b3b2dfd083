"""
Litterbugs - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    platform: str = "ios"

    # Hosted backend (Supabase)
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    reports_table: str = "reports"
    photo_bucket: str = "report_photos"
    http_timeout_seconds: float = 30.0

    # Self-hosted backend (SQL)
    database_url: Optional[str] = None
    storage_signing_secret: Optional[str] = None
    storage_public_url: str = "http://localhost:8000/storage"
    report_ttl_days: int = 30

    # Reports
    default_report_title: str = "Litter report"
    guest_owner_segment: str = "guest"
    max_photos_per_report: int = 3
    signed_url_ttl_seconds: int = 3600

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
