from __future__ import annotations

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    log_level: str = "INFO"
    # Fail at startup instead of on the first request when secrets are missing
    require_secrets_on_startup: bool = False

    # API
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = ["*"]
    cors_allow_headers: list[str] = [
        "authorization",
        "x-client-info",
        "apikey",
        "content-type",
    ]
    trusted_hosts: list[str] = ["*"]
    root_path: str = ""

    # Supabase
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    supabase_service_role_key: str | None = None

    # Gemini
    gemini_api_key: SecretStr | None = None
    gemini_model: str = "gemini-1.5-flash-latest"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_max_attempts: int = 1  # 1 disables retries
    gemini_retry_max_wait_seconds: float = 8.0

    # Outbound HTTP
    http_timeout_seconds: float = 60.0
    image_fetch_timeout_seconds: float = 15.0

    # Study planner
    max_plan_materials: int = 5
    material_excerpt_chars: int = 2000


settings = Settings()
