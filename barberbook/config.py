# barberbook/config.py
"""Settings for the booking service.

Everything is read from the environment once at import time, with defaults
that work for a local SQLite setup.
"""
import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./barber.db")
DB_BUSY_TIMEOUT = float(os.getenv("DB_BUSY_TIMEOUT", "30"))  # seconds a writer waits on a locked SQLite file
DB_ECHO = _env_bool("DB_ECHO", False)

# Auth
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-later")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# Booking
SLOT_MINUTES = int(os.getenv("SLOT_MINUTES", "45"))
BOOKING_WINDOW_DAYS = int(os.getenv("BOOKING_WINDOW_DAYS", "4"))
REQUIRE_CUSTOMER_ACCOUNT = _env_bool("REQUIRE_CUSTOMER_ACCOUNT", False)

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
