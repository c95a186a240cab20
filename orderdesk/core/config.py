# orderdesk/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - JWT_SECRET (HS256 secret shared with the identity provider)

    Optional:
      - DATABASE_URL (defaults to a local SQLite file)
      - BUSINESS_TIMEZONE (calendar used for "same day" and overdue checks)
      - NOTIFY_EMAILS (comma separated recipients for new-order emails)
    """

    PROJECT_NAME: str = "OrderDesk Backend"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str = "sqlite:///./orderdesk.db"

    # JWT verification (tokens are issued by the external identity provider)
    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    # Business rules
    BUSINESS_TIMEZONE: str = "America/Santiago"
    NULLIFY_AFTER_DAYS: int = 7
    MAX_ITEMS_PER_ORDER: int = 20

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]

    NOTIFY_EMAILS: str = ""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def notify_recipients(self) -> list[str]:
        return [e.strip() for e in self.NOTIFY_EMAILS.split(",") if e.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
