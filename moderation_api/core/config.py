import os
import logging
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes", "on"}
LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}
FALSE_VALUES = {"0", "false", "no", "off", ""}


class Settings:
    def __init__(self):
        """Initialize settings with validation"""
        self._validate_required_env_vars()
        self._load_validated_settings()

    def _validate_required_env_vars(self):
        """Validate all required and typed environment variables"""
        required_vars = {
            "GEMINI_API_KEY": "Gemini AI API key for content moderation",
        }
        typed_vars = {
            "RATE_LIMIT_MAX_REQUESTS": "int",
            "RATE_LIMIT_WINDOW_SECONDS": "int",
            "MAX_CONTENT_LENGTH": "int",
            "RATE_LIMIT_FAIL_OPEN": "bool",
            "EXPOSE_ERROR_DETAILS": "bool",
            "LOG_LEVEL": "level",
        }

        missing_vars = []
        invalid_vars = []

        for var_name, description in required_vars.items():
            if not os.getenv(var_name):
                missing_vars.append(f"  - {var_name}: {description}")

        for var_name, kind in typed_vars.items():
            value = os.getenv(var_name)
            if value is not None and not self._validate_var_format(kind, value):
                invalid_vars.append(f"  - {var_name}: Invalid format (expected {kind})")

        if missing_vars or invalid_vars:
            error_msg = "CONFIGURATION ERROR - Application cannot start:\n\n"

            if missing_vars:
                error_msg += "Missing required environment variables:\n"
                error_msg += "\n".join(missing_vars) + "\n\n"

            if invalid_vars:
                error_msg += "Invalid environment variables:\n"
                error_msg += "\n".join(invalid_vars) + "\n\n"

            error_msg += "Please check your .env file and ensure all required variables are set."

            logger.critical(error_msg)
            raise ValueError(error_msg)

        logger.info("✅ All required environment variables validated")

    def _validate_var_format(self, kind: str, value: str) -> bool:
        """Validate typed environment variable formats"""
        if kind == "int":
            return value.strip().isdigit() and int(value) > 0

        elif kind == "bool":
            return value.strip().lower() in TRUE_VALUES | FALSE_VALUES

        elif kind == "level":
            return value.strip().upper() in LOG_LEVELS

        return True

    def _load_validated_settings(self):
        """Load settings after validation"""
        # Provider
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY")
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")

        # Rate limiter store (Vercel KV exposes KV_URL)
        self.REDIS_URL: str = os.getenv("REDIS_URL") or os.getenv("KV_URL") or "redis://localhost:6379/0"
        self.RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "5"))
        self.RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
        self.RATE_LIMIT_FAIL_OPEN: bool = _as_bool(os.getenv("RATE_LIMIT_FAIL_OPEN"))

        # Request handling
        self.MAX_CONTENT_LENGTH: int = int(os.getenv("MAX_CONTENT_LENGTH", "1200"))
        self.EXPOSE_ERROR_DETAILS: bool = _as_bool(os.getenv("EXPOSE_ERROR_DETAILS"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()


def _as_bool(value) -> bool:
    return value is not None and value.strip().lower() in TRUE_VALUES


@lru_cache()
def get_settings() -> Settings:
    return Settings()
