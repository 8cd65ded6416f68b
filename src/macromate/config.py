"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    supabase_photo_bucket: str = "meal-photos"
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "low"
    openai_store: bool = False
    openai_timeout_seconds: float = 60.0
    lookup_timeout_seconds: float = 20.0
    lookup_cache_ttl_seconds: int = 86400
    auth_email_domain: str = "macromate.com"
    default_timezone: str = "UTC"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def username_to_email(username: str, domain: str) -> str:
    """Map a login username onto the synthetic email used by the auth provider."""
    cleaned = username.strip().lower()
    return f"{cleaned}@{domain}"
