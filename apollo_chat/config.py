"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from apollo_chat.models import is_known_model

DEFAULT_SYSTEM_PROMPT = (
    "You are Apollo, a helpful AI assistant with no artificial restrictions."
)


class Settings(BaseSettings):
    """Strongly typed application configuration."""

    anthropic_api_key: str | None = Field(default=None, alias="ANTHROPIC_API_KEY")
    messages_endpoint: str = Field(
        default="https://api.anthropic.com/v1/messages", alias="MESSAGES_ENDPOINT"
    )
    anthropic_version: str = Field(default="2023-06-01", alias="ANTHROPIC_VERSION")
    default_model: str = Field(default="claude-sonnet-4-20250514", alias="DEFAULT_MODEL")
    system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT, alias="SYSTEM_PROMPT")
    max_tokens: int = Field(default=4000, ge=100, le=8000, alias="MAX_TOKENS")
    throttle_delay: float = Field(
        default=0.5, ge=0.0, alias="THROTTLE_DELAY", description="Seconds"
    )
    copy_feedback_seconds: float = Field(default=2.0, ge=0.0, alias="COPY_FEEDBACK_SECONDS")
    chat_timeout: float = Field(default=120.0, alias="CHAT_TIMEOUT")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", alias="LOG_LEVEL"
    )
    port: int = Field(default=8000, alias="PORT")
    max_text_length: int = Field(default=20000, alias="MAX_TEXT_LENGTH")
    ws_inactivity_timeout: float = Field(
        default=600.0, alias="WS_INACTIVITY_TIMEOUT", description="Seconds"
    )

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    @field_validator("default_model")
    @classmethod
    def check_default_model(cls, value: str) -> str:
        if not is_known_model(value):
            raise ValueError(f"unknown model: {value}")
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of settings."""

    return Settings()
