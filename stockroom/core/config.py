# stockroom/core/config.py

import os
from functools import lru_cache
from typing import List, Optional, Annotated
from pydantic import ConfigDict, BeforeValidator
from pydantic_settings import BaseSettings

def _parse_email_list(value):
    if value in (None, "", []):
        return []
    if isinstance(value, str):
        return [email.strip() for email in value.split(",") if email.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(email).strip() for email in value if str(email).strip()]
    return []


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # Database settings
    DATABASE_URL: str = ""

    # Runtime
    DEBUG: bool = False      # FastAPI debug mode
    LOG_LEVEL: str = "INFO"  # Level for stockroom loggers and the root handler

    # Stock workflow
    CHECK_THRESHOLD_ON_CREATE: bool = False  # Run the reorder check straight after create_stock
    LEGACY_ERROR_STATUS: bool = True         # Every service error -> HTTP 500

    # Nightly sweep of entries sitting below their reorder threshold
    SWEEP_SCHEDULE_ENABLED: bool = False
    SWEEP_CRON_HOUR: int = 6

    # Email notifications
    NOTIFICATION_EMAILS: Annotated[List[str], BeforeValidator(lambda v: _parse_email_list(v))] = []

    # SMTP / Email
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False
    SMTP_TIMEOUT: int = 30
    SMTP_FROM_EMAIL: Optional[str] = None
    SMTP_FROM_NAME: Optional[str] = None

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every request"""
    return Settings()

def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()
