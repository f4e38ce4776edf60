"""Application configuration."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_BACKEND_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "GrantMate API"
    database_url: str = "sqlite+pysqlite:///./grantmate.db"
    create_schema_on_startup: bool = True
    cors_allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "o1-preview"
    openai_fallback_model: str = "gpt-4o-mini"
    openai_fallback_max_tokens: int = 4000
    openai_fallback_temperature: float = 0.7
    openai_timeout_seconds: int = 60
    updates_default_limit: int = 50
    updates_max_limit: int = 500
    client_reconnect_delay_seconds: float = 3.0
    client_max_reconnect_attempts: int = 0

    model_config = SettingsConfigDict(
        env_file=str(_BACKEND_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()
