import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _env_int(name: str, default: str) -> int:
    """Parse an integer env var, failing fast with the variable name"""
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid integer for {name}: {raw!r}") from None


def _env_float(name: str, default: str) -> float:
    """Parse a float env var, failing fast with the variable name"""
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid float for {name}: {raw!r}") from None


def _env_bool(name: str, default: str) -> bool:
    raw = os.getenv(name, default).strip().lower()
    if raw in ("true", "1", "yes"):
        return True
    if raw in ("false", "0", "no", ""):
        return False
    raise ValueError(f"Invalid boolean for {name}: {raw!r}")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./carwash.db")

# Connection pool settings (ignored for SQLite)
DB_POOL_SIZE = _env_int("DB_POOL_SIZE", "20")
DB_MAX_OVERFLOW = _env_int("DB_MAX_OVERFLOW", "30")
DB_POOL_TIMEOUT = _env_int("DB_POOL_TIMEOUT", "30")
DB_POOL_RECYCLE = _env_int("DB_POOL_RECYCLE", "300")
DB_LOG_SLOW_QUERIES = _env_bool("DB_LOG_SLOW_QUERIES", "true")
DB_SLOW_QUERY_THRESHOLD = _env_float("DB_SLOW_QUERY_THRESHOLD", "1.0")

# Redis is optional - caching and rate limit sync run memory-only without it
REDIS_URL = os.getenv("REDIS_URL")

# Pricing
PRICING_RULES_CACHE_TTL = _env_int("PRICING_RULES_CACHE_TTL", "300")
# When true, booking creation charges the same total as the quote endpoint
# (car type multiplier, distance fee, coupon). Default keeps base + addons.
APPLY_FULL_PRICING_ON_BOOKING = _env_bool("APPLY_FULL_PRICING_ON_BOOKING", "false")

# Bookings
BOOKING_REF_PREFIX = os.getenv("BOOKING_REF_PREFIX", "BK")
BOOKING_REF_WIDTH = _env_int("BOOKING_REF_WIDTH", "6")
# Admin may force any status unless this is turned on
ENFORCE_STATUS_TRANSITIONS = _env_bool("ENFORCE_STATUS_TRANSITIONS", "false")

# Customers
PHONE_COUNTRY_CODE = os.getenv("PHONE_COUNTRY_CODE", "967")
CUSTOMER_UPSERT_RETRIES = _env_int("CUSTOMER_UPSERT_RETRIES", "3")

# WhatsApp notifications (Twilio WhatsApp API)
WHATSAPP_ENABLED = _env_bool("WHATSAPP_ENABLED", "false")
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_WHATSAPP_FROM = os.getenv("TWILIO_WHATSAPP_FROM")  # e.g. +14155238886
TWILIO_API_BASE_URL = os.getenv("TWILIO_API_BASE_URL", "https://api.twilio.com/2010-04-01")
WHATSAPP_DEFAULT_LANGUAGE = os.getenv("WHATSAPP_DEFAULT_LANGUAGE", "ar")
WHATSAPP_TIMEOUT_SECONDS = _env_float("WHATSAPP_TIMEOUT_SECONDS", "10.0")

# Public intake endpoints (bookings, quotes, fleet leads)
PUBLIC_RATE_LIMIT = _env_int("PUBLIC_RATE_LIMIT", "30")
PUBLIC_RATE_WINDOW_SECONDS = _env_int("PUBLIC_RATE_WINDOW_SECONDS", "60")

# Frontend origins allowed by CORS (comma separated)
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

if WHATSAPP_DEFAULT_LANGUAGE not in ("ar", "en"):
    raise ValueError(
        f"WHATSAPP_DEFAULT_LANGUAGE must be 'ar' or 'en', got {WHATSAPP_DEFAULT_LANGUAGE!r}"
    )
if BOOKING_REF_WIDTH < 1:
    raise ValueError(f"BOOKING_REF_WIDTH must be >= 1, got {BOOKING_REF_WIDTH}")
