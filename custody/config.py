from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Custody Desk"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    database_url: str = "postgresql+asyncpg://custody:custody@db:5432/custody"
    database_pool_size: int | None = None
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Reject role headers that do not name a known role. When disabled, unknown
    # roles are treated as ``employee``.
    strict_roles: bool = True
    # Require a ProjectMembership link before an employee may submit against a project.
    enforce_project_membership: bool = False
    currency: str = "SAR"

    notification_webhook_url: str | None = None
    notification_timeout_seconds: float = 5.0

    upload_dir: str = "uploads"
    public_base_url: str = "http://localhost:8000/files"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
