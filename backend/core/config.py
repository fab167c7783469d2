import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./appointments.db")

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:5173"])

# Empty means the server's local time zone.
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "")

SUBMISSION_CUTOFF_HOUR = int(os.getenv("SUBMISSION_CUTOFF_HOUR", "14"))
BREAK_START_HOUR = int(os.getenv("BREAK_START_HOUR", "12"))
BREAK_END_HOUR = int(os.getenv("BREAK_END_HOUR", "13"))

RESCHEDULE_HORIZON_DAYS = int(os.getenv("RESCHEDULE_HORIZON_DAYS", "60"))
RESCHEDULE_SKIP_WEEKENDS = _get_bool(os.getenv("RESCHEDULE_SKIP_WEEKENDS"), default=False)

NOTIFICATIONS_ENABLED = _get_bool(os.getenv("NOTIFICATIONS_ENABLED"), default=True)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if not 0 <= BREAK_START_HOUR < BREAK_END_HOUR <= 24:
        raise RuntimeError("BREAK_END_HOUR must be after BREAK_START_HOUR.")
    if RESCHEDULE_HORIZON_DAYS < 0:
        raise RuntimeError("RESCHEDULE_HORIZON_DAYS cannot be negative.")
