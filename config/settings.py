"""Application settings and configuration management."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interviews.db")
    APP_CONFIG_PATH: str = Field(default="app_config.json")

    INTERVIEW_MODE: Literal["topic", "role"] = "topic"
    ROLE_PLANS_PATH: Optional[str] = None

    LLM_BASE_URL: str = "https://api.openai.com"
    LLM_ENDPOINT: str = "/v1/chat/completions"
    LLM_MODEL: str = "gpt-4o"
    LLM_API_KEY_ENV: str = "OPENAI_API_KEY"
    LLM_TIMEOUT_S: float = 60.0
    LLM_TEMPERATURE: float = 0.8

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
