"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_chat_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "medium"
    openai_store: bool = False
    storage_backend: str = "memory"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    timezone: str | None = None
    session_idle_hours: int = 168
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_storage_backend(raw: str) -> str:
    """Normalize the storage backend name from env."""
    cleaned = raw.strip().lower()
    if cleaned not in {"memory", "supabase"}:
        raise ValueError(f"Unknown storage backend: {raw!r}")
    return cleaned
