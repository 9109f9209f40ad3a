import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

class LeavePolicySettings(BaseModel):
    default_vacation_days: int = Field(default=int(os.getenv("DEFAULT_VACATION_DAYS", "22")))
    default_sick_days: int = Field(default=int(os.getenv("DEFAULT_SICK_DAYS", "3")))
    # Approvals never block on balance unless this is switched on
    enforce_balance_floor: bool = Field(default=os.getenv("ENFORCE_BALANCE_FLOOR", "false").lower() == "true")
    critical_absence_threshold: float = Field(default=float(os.getenv("CRITICAL_ABSENCE_THRESHOLD", "0.5")))
    availability_horizon_days: int = Field(default=int(os.getenv("AVAILABILITY_HORIZON_DAYS", "30")))
    upcoming_holiday_window_days: int = Field(default=int(os.getenv("UPCOMING_HOLIDAY_WINDOW_DAYS", "7")))

class Config(BaseModel):
    app_name: str = "Leave Manager"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./database.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))  # 24 hours
    bootstrap_admin_email: Optional[str] = os.getenv("BOOTSTRAP_ADMIN_EMAIL")
    bootstrap_admin_password: Optional[str] = os.getenv("BOOTSTRAP_ADMIN_PASSWORD")

    # Leave rules
    leave: LeavePolicySettings = LeavePolicySettings()

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:5173,"
                "http://127.0.0.1:3000,http://127.0.0.1:5173",
            ).split(",")
            if o.strip()
        ]
    )

    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key or "change-it" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
else:
    if "dev-only" in settings.secret_key:
        _logger.warning("⚠ Using insecure default SECRET_KEY, only acceptable in development.")
