# tyredesk/core/settings.py
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # === App ===
    APP_ENV: str = "local"  # local | development | production
    ALLOWED_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:8080"]

    # === Database ===
    DATABASE_URL: str = "sqlite:///./tyredesk.db"

    # === Auth (tokens are issued by the hosted auth provider) ===
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_AUDIENCE: Optional[str] = "authenticated"

    # === Extraction service ===
    EXTRACTION_SERVICE_URL: str = Field(
        "http://localhost:54321/functions/v1/process-price-list",
        description="Endpoint of the price list extraction function",
    )
    EXTRACTION_SERVICE_KEY: Optional[str] = None
    EXTRACTION_TIMEOUT_SEC: float = 120.0

    # === Uploads ===
    MAX_UPLOAD_MB: int = 20
    ALLOWED_PRICE_LIST_EXTENSIONS: list[str] = [".pdf", ".xlsx", ".xls", ".csv"]
    RATE_LIMIT_UPLOADS: str = "10/minute"

    # === Observability ===
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    s = Settings()
    if s.APP_ENV.lower() == "production" and s.LOG_LEVEL.upper() == "DEBUG":
        s.LOG_LEVEL = "INFO"
    return s


settings = get_settings()  # reads .env
