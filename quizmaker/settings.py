from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List

class Settings(BaseSettings):
    # Completion API (any OpenAI-compatible gateway)
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    MOCK_MODE: bool = False

    # Upstream call knobs
    LLM_TIMEOUT_SECONDS: float = 60.0
    RESEARCH_TEMPERATURE: float = 0.5
    GENERATION_TEMPERATURE: float = 0.7

    # Safety/abuse knobs
    RATE_LIMIT: str = "30/minute"

    # CORS
    ALLOW_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    # Optional extra frontend
    FRONTEND_ORIGIN: str | None = None

    # Supabase
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_JWT_SECRET: str | None = None

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
if settings.FRONTEND_ORIGIN and "*" not in settings.ALLOW_ORIGINS:
    settings.ALLOW_ORIGINS.append(settings.FRONTEND_ORIGIN)
