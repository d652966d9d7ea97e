# oneyatra/config.py
from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY = 1.0


class Settings(BaseSettings):
    # OpenAI; the key keeps its conventional unprefixed names
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "API_KEY"),
    )
    model: str = DEFAULT_MODEL

    # Retry budget for upstream calls
    retry_attempts: int = Field(DEFAULT_RETRY_ATTEMPTS, ge=0)
    retry_base_delay: float = Field(DEFAULT_RETRY_BASE_DELAY, ge=0)

    # Comma-separated CORS origins
    allowed_origins: str = "*"

    # read .env and ignore any extra keys
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ONEYATRA_",
        extra="ignore",
        frozen=True,
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def _blank_key_is_unset(cls, value):
        if isinstance(value, str):
            return value.strip() or None
        return value

    @property
    def live(self) -> bool:
        return bool(self.api_key)

    @property
    def origin_list(self) -> List[str]:
        origins = [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
        return origins or ["*"]


def get_settings() -> Settings:
    """Read settings from the environment on every call so tests can monkeypatch."""
    return Settings()


def allowed_origins() -> List[str]:
    return get_settings().origin_list
