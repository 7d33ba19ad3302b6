from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List

class Settings(BaseSettings):
    # OpenRouter (OpenAI-compatible)
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENAI_MODEL: str = "microsoft/wizardlm-2-8x22b"
    MOCK_MODE: bool = False
    REQUEST_TIMEOUT: float = 30.0
    APP_TITLE: str = "ChatBuddy - AI Study Assistant"

    # Safety/abuse knobs
    RATE_LIMIT: str = "100/15 minutes"

    # CORS
    ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )

    # Deployed frontend; also sent as HTTP-Referer upstream
    FRONTEND_URL: str | None = None

    # Tokens
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7

    # Supabase (optional; in-memory store otherwise)
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_USERS_TABLE: str = "users"

    # Server
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
if settings.FRONTEND_URL:
    settings.ALLOW_ORIGINS.append(settings.FRONTEND_URL)
