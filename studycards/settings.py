from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List

class Settings(BaseSettings):
    # OpenAI-compatible chat endpoint
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str | None = None
    MOCK_MODE: bool = False

    # Document processing
    MAX_PAGES: int = 30
    MAX_PROMPT_CHARS: int = 12000
    CACHE_DIR: str = "cache"

    # Safety/abuse knobs
    MAX_UPLOAD_MB: int = 20
    MAX_SCREENSHOT_MB: int = 5
    RATE_LIMIT: str = "30/minute"

    # Plans
    FREE_UPLOAD_LIMIT: int = 5
    PREMIUM_DAYS: int = 30

    # Quiz sessions
    QUIZ_SESSION_TTL_SECONDS: int = 3600

    # CORS
    ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )

    # Optional extra frontend
    FRONTEND_ORIGIN: str | None = None

    # Supabase
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_JWT_SECRET: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
if settings.FRONTEND_ORIGIN:
    settings.ALLOW_ORIGINS.append(settings.FRONTEND_ORIGIN)
