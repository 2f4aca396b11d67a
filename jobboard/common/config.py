"""
Configuration loader for the job board data layer.

Loads all settings from environment variables (.env file).
Validates required settings and provides type-safe access.
"""

import os
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    """
    Centralized configuration for the data layer and its tooling.

    All values loaded from environment variables - NO SECRETS IN CODE.
    """

    # ===== Runtime =====
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").lower()

    # ===== MongoDB =====
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGO_DB_NAME: str = os.getenv("MONGO_DB_NAME", "jobboard")
    ANNOUNCEMENTS_COLLECTION: str = os.getenv("ANNOUNCEMENTS_COLLECTION", "announcements")

    # Read paths degrade to empty results on datastore errors when enabled
    REPOSITORY_FAIL_OPEN: bool = _env_flag("REPOSITORY_FAIL_OPEN", "true")

    # ===== Redis (optional, in-memory fallback when unset) =====
    REDIS_URL: str = os.getenv("REDIS_URL", "")
    SLUG_CACHE_TTL_SECONDS: int = int(os.getenv("SLUG_CACHE_TTL_SECONDS", "3600"))

    # ===== Secrets at rest =====
    TOTP_ENCRYPTION_KEY: str = os.getenv("TOTP_ENCRYPTION_KEY", "")

    # ===== Logging =====
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "simple")

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT == "production"

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required configuration is present.
        Raises ValueError if critical settings are missing.
        """
        required_settings = {
            "MONGODB_URI": cls.MONGODB_URI,
        }

        if cls.is_production():
            required_settings["TOTP_ENCRYPTION_KEY"] = cls.TOTP_ENCRYPTION_KEY

        missing: List[str] = [name for name, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required configuration: {', '.join(missing)}. "
                f"Please check your .env file."
            )

        if cls.LOG_FORMAT not in ("simple", "json"):
            raise ValueError(f"LOG_FORMAT must be 'simple' or 'json', got '{cls.LOG_FORMAT}'")

    @classmethod
    def summary(cls) -> str:
        """Return a summary of the current configuration (safe for logging)."""
        return f"""
Configuration Summary:
  Environment: {cls.ENVIRONMENT}
  MongoDB: {'✓ Configured' if cls.MONGODB_URI else '✗ Missing'} ({cls.MONGO_DB_NAME}.{cls.ANNOUNCEMENTS_COLLECTION})
  Redis: {'✓ Configured' if cls.REDIS_URL else '✗ In-memory fallback'}
  Read policy: {'fail-open' if cls.REPOSITORY_FAIL_OPEN else 'fail-fast'}
  Secret encryption key: {'✓ Configured' if cls.TOTP_ENCRYPTION_KEY else '✗ Missing'}
        """.strip()
