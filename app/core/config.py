"""Application configuration.

Settings are read from environment variables / .env file via pydantic-settings.
Google Sheets settings are optional: when they are missing the sheet mirror is
disabled and leads are only stored in the database.
"""
import logging
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

STANDARD_ENVS = ("development", "production", "test")
MIN_JWT_SECRET_LENGTH = 32


class Settings(BaseSettings):
    APP_ENV: str = "development"
    DATABASE_URL: str
    JWT_SECRET_KEY: str = ""
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Bootstrap admin, seeded on startup when both are set
    ADMIN_EMAIL: str = ""
    ADMIN_PASSWORD: str = ""

    # Google Sheets mirror
    GOOGLE_SHEETS_ID: str = ""
    GOOGLE_SERVICE_ACCOUNT_FILE: str = ""
    GOOGLE_SHEETS_API_KEY: str = ""
    GOOGLE_SHEET_NAME: str = "Sheet1"
    SHEETS_SYNC_BATCH_SIZE: int = 100

    # CORS, comma separated
    CLIENT_URLS: str = (
        "http://localhost:3000,http://localhost:3001,"
        "http://127.0.0.1:3000,http://127.0.0.1:3001"
    )

    # Throttling per client IP, in slowapi rate notation
    LEAD_SUBMIT_RATE: str = "10/hour"
    LOGIN_RATE: str = "5/15 minutes"
    API_RATE: str = "100/minute"

    @property
    def client_urls(self) -> list[str]:
        return [i.strip() for i in self.CLIENT_URLS.split(",") if i.strip()]

    @property
    def sheets_configured(self) -> bool:
        return bool(self.GOOGLE_SHEETS_ID and (self.GOOGLE_SERVICE_ACCOUNT_FILE or self.GOOGLE_SHEETS_API_KEY))

    class Config:
        env_file = ".env"


def validate_settings(s: "Settings") -> None:
    """Check critical settings and warn about recommended ones.

    Raises ValueError when the JWT secret is missing; everything else only logs.
    """
    if not s.JWT_SECRET_KEY:
        raise ValueError(
            "JWT_SECRET_KEY is not set. "
            "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
        )

    if not s.sheets_configured:
        missing = []
        if not s.GOOGLE_SHEETS_ID:
            missing.append("GOOGLE_SHEETS_ID")
        if not (s.GOOGLE_SERVICE_ACCOUNT_FILE or s.GOOGLE_SHEETS_API_KEY):
            missing.append("GOOGLE_SERVICE_ACCOUNT_FILE or GOOGLE_SHEETS_API_KEY")
        logger.warning(
            "Missing recommended settings: %s. Google Sheets sync will be disabled.",
            ", ".join(missing),
        )

    if len(s.JWT_SECRET_KEY) < MIN_JWT_SECRET_LENGTH:
        logger.warning(
            "JWT_SECRET_KEY is weak (< %d characters). Use a stronger secret in production.",
            MIN_JWT_SECRET_LENGTH,
        )

    if s.APP_ENV not in STANDARD_ENVS:
        logger.warning(
            "APP_ENV value '%s' is not standard. Use one of: %s",
            s.APP_ENV,
            ", ".join(STANDARD_ENVS),
        )


settings = Settings()
