import os
import logging
from datetime import date
from pydantic import BaseModel, Field
from typing import List
from dotenv import load_dotenv

load_dotenv()

class BusinessSettings(BaseModel):
    working_hours_per_day: int = int(os.getenv("WORKING_HOURS_PER_DAY", "9"))
    working_start_hour: int = int(os.getenv("WORKING_START_HOUR", "9"))
    working_end_hour: int = int(os.getenv("WORKING_END_HOUR", "18"))
    min_date: date = date.fromisoformat(os.getenv("MIN_DATE", "2000-01-01"))
    max_date: date = date.fromisoformat(os.getenv("MAX_DATE", "3000-01-01"))

    # Leave type (English name) that is never checked against a quota
    emergency_leave_type: str = os.getenv("EMERGENCY_LEAVE_TYPE", "Emergency")
    default_language: str = os.getenv("DEFAULT_LANGUAGE", "th")

class Config(BaseModel):
    app_name: str = os.getenv("APP_TITLE", "SiamLeave API")
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./siamleave.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    login_rate_limit: str = os.getenv("LOGIN_RATE_LIMIT", "10/minute")

    # Optional first superadmin, created at startup when none exists
    bootstrap_admin_email: str = os.getenv("BOOTSTRAP_ADMIN_EMAIL", "")
    bootstrap_admin_password: str = os.getenv("BOOTSTRAP_ADMIN_PASSWORD", "")

    version: str = os.getenv("APP_VERSION", "1.0.0")
    request_id_header: str = "X-Request-ID"

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:3001,"
                "http://localhost:5173,http://127.0.0.1:5173,"
                "http://localhost:8080,http://localhost:8081",
            ).split(",")
            if o.strip()
        ]
    )

    business: BusinessSettings = BusinessSettings()

settings = Config()

def get_business_settings() -> BusinessSettings:
    """Dependency hook so routers receive business rules instead of reading the module global."""
    return settings.business

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif "dev-only" in settings.secret_key:
    _logger.warning("⚠ Using insecure default SECRET_KEY, only acceptable in development.")
