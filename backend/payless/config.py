"""
Application Configuration — Environment & Settings
Centralizes all config from .env with Pydantic Settings for validation.
"""
from pathlib import Path
from functools import lru_cache
from pydantic_settings import BaseSettings

# Resolve paths relative to backend/ directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # --- Core ---
    APP_NAME: str = "Payless Payment Reconciliation API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    CORS_ORIGINS: list[str] = ["*"]

    # --- Database ---
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'data' / 'payless.db'}"

    # --- Auth gate ---
    SESSION_EXPIRY_MINUTES: int = 720

    # --- Pagination ---
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # --- Token validity ---
    TOKEN_LENGTH: int = 20
    REJECT_ALL_ZERO_TOKENS: bool = False

    # --- Refunds ---
    REFUND_EXCLUDED_PREFIX: str = "PAYLESS"
    REFUND_UPLOAD_COLUMNS: dict[str, str] = {
        "TIGO-PESA": "ORDERID",
        "AIRTEL-MONEY": "SALES_ORDER_NUMBER",
    }
    REFUND_UPLOAD_MAX_BYTES: int = 10 * 1024 * 1024

    # --- Phone numbers ---
    PHONE_COUNTRY_CODE: str = "255"
    PHONE_SUBSCRIBER_DIGITS: int = 9

    # --- SMS provider ---
    SMS_API_KEY: str = ""
    SMS_PASSWORD: str = ""
    SMS_BASE_URL: str = ""
    SMS_SENDER: str = "Payless"
    SMS_TIMEOUT_SECONDS: float = 30.0
    SUPPORT_CONTACTS: list[str] = ["0750013030", "0777901467"]
    SMS_RATE_LIMIT_REQUESTS: int = 10
    SMS_RATE_LIMIT_WINDOW: int = 60

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = str(BASE_DIR / "logs")
    LOG_FILE: str = ""
    LOG_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 5

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
