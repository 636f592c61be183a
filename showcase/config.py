"""Showcase configuration loaded from environment variables."""

from __future__ import annotations

import json
from pydantic_settings import BaseSettings
from pydantic import Field


DEFAULT_JWT_SECRET = "change-me-in-production-showcase"
DEFAULT_APP_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./showcase.db",
        alias="DATABASE_URL",
    )
    auto_create_schema: bool = Field(default=True, alias="AUTO_CREATE_SCHEMA")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    cors_origins: str = Field(default='["http://localhost:3000"]', alias="CORS_ORIGINS")
    app_env: str = Field(default="development", alias="APP_ENV")
    strict_startup_validation: bool = Field(default=False, alias="STRICT_STARTUP_VALIDATION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Admin auth
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET, alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_expire_minutes: int = Field(default=60 * 12, alias="JWT_EXPIRE_MINUTES")
    admin_email: str = Field(default="", alias="ADMIN_EMAIL")
    admin_password: str = Field(default="", alias="ADMIN_PASSWORD")

    # Engagement cookies
    app_secret: str = Field(default=DEFAULT_APP_SECRET, alias="APP_SECRET")

    # Real user monitoring
    rum_window_ms: int = Field(default=24 * 60 * 60 * 1000, alias="RUM_WINDOW_MS")
    rum_capacity: int = Field(default=10_000, alias="RUM_CAPACITY")
    rum_default_sample_rate: float = Field(default=0.15, alias="RUM_DEFAULT_SAMPLE_RATE")
    rum_max_batch: int = Field(default=100, alias="RUM_MAX_BATCH")
    rum_ingest_rate_limit: str = Field(default="120/minute", alias="RUM_INGEST_RATE_LIMIT")

    # Maintenance mode (fallback when the settings table is unreachable)
    maintenance_mode: bool = Field(default=False, alias="MAINTENANCE_MODE")
    allowed_maintenance_emails: str = Field(default="", alias="ALLOWED_MAINTENANCE_EMAILS")
    maintenance_cache_seconds: float = Field(default=60.0, alias="MAINTENANCE_CACHE_SECONDS")

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() in {"production", "prod"}

    @property
    def secure_cookies(self) -> bool:
        return self.is_production

    @property
    def maintenance_allowed_emails(self) -> str:
        return self.allowed_maintenance_emails or self.admin_email

    @property
    def cors_origins_list(self) -> list[str]:
        raw = (self.cors_origins or "").strip()
        if not raw:
            return []

        # Supports JSON list format and comma-separated format.
        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
                if isinstance(parsed, list):
                    return [str(origin).strip() for origin in parsed if str(origin).strip()]
            except json.JSONDecodeError:
                pass

        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
