"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants, plus a few
helpers for reading settings and building public URLs.
"""

import os
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# ── Database (PostgreSQL) ─────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "kishanskraft_db")
DB_USER: str = os.getenv("DB_USER", "kishanskraft")
DB_PASS: str = os.getenv("DB_PASS", "")
DB_CHARSET: str = os.getenv("DB_CHARSET", "UTF8")

# ── Application ───────────────────────────────────────────
APP_NAME: str = os.getenv("APP_NAME", "KishansKraft")
APP_VERSION: str = "1.0.0"
APP_URL: str = os.getenv("APP_URL", "http://localhost")
APP_DEBUG: bool = _env_bool("APP_DEBUG", False)
APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "Asia/Kolkata")

# ── Security ──────────────────────────────────────────────
JWT_SECRET: str = os.getenv("JWT_SECRET", "")
PASSWORD_SALT: str = os.getenv("PASSWORD_SALT", "")
OTP_EXPIRY_MINUTES: int = int(os.getenv("OTP_EXPIRY_MINUTES", "10"))
SESSION_TIMEOUT_HOURS: int = int(os.getenv("SESSION_TIMEOUT_HOURS", "24"))

# ── File uploads ──────────────────────────────────────────
UPLOAD_MAX_SIZE: int = int(os.getenv("UPLOAD_MAX_SIZE", str(5 * 1024 * 1024)))
_raw_types = os.getenv("ALLOWED_IMAGE_TYPES", "jpg,jpeg,png,webp")
ALLOWED_IMAGE_TYPES: list[str] = [t.strip().lower() for t in _raw_types.split(",") if t.strip()]
UPLOAD_PATH: str = os.getenv("UPLOAD_PATH", "/frontend/assets/images/uploads/")

# ── Email (SMTP) ──────────────────────────────────────────
SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
FROM_EMAIL: str = os.getenv("FROM_EMAIL", "noreply@kishanskraft.com")
FROM_NAME: str = os.getenv("FROM_NAME", APP_NAME)

# ── SMS ───────────────────────────────────────────────────
SMS_API_KEY: str = os.getenv("SMS_API_KEY", "")
SMS_SENDER_ID: str = os.getenv("SMS_SENDER_ID", "KISHNS")
SMS_API_URL: str = os.getenv("SMS_API_URL", "https://api.textlocal.in/send/")

# ── Payment gateway (Razorpay) ────────────────────────────
RAZORPAY_KEY_ID: str = os.getenv("RAZORPAY_KEY_ID", "")
RAZORPAY_KEY_SECRET: str = os.getenv("RAZORPAY_KEY_SECRET", "")

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR: str = os.getenv("LOG_DIR", "")  # empty disables the log file
LOG_MAX_FILE_SIZE: int = int(os.getenv("LOG_MAX_FILE_SIZE", str(10 * 1024 * 1024)))
LOG_MAX_FILES: int = int(os.getenv("LOG_MAX_FILES", "5"))
LOG_QUERY_PARAMS: bool = _env_bool("LOG_QUERY_PARAMS", APP_DEBUG)

# ── Business rules ────────────────────────────────────────
MIN_ORDER_AMOUNT: float = float(os.getenv("MIN_ORDER_AMOUNT", "200.00"))
FREE_SHIPPING_THRESHOLD: float = float(os.getenv("FREE_SHIPPING_THRESHOLD", "500.00"))
SHIPPING_CHARGES: float = float(os.getenv("SHIPPING_CHARGES", "50.00"))
COD_CHARGES: float = float(os.getenv("COD_CHARGES", "30.00"))

# ── Contact information ───────────────────────────────────
COMPANY_NAME: str = "KishansKraft"
COMPANY_ADDRESS: str = "Madhubani, Bihar, India"
COMPANY_PHONE: str = "+91-9876543210"
COMPANY_EMAIL: str = "info@kishanskraft.com"
COMPANY_GST: str = os.getenv("COMPANY_GST", "")

# ── Social media ──────────────────────────────────────────
FACEBOOK_URL: str = "https://facebook.com/kishanskraft"
INSTAGRAM_URL: str = "https://instagram.com/kishanskraft"
TWITTER_URL: str = "https://twitter.com/kishanskraft"
YOUTUBE_URL: str = "https://youtube.com/kishanskraft"

# ── Rate limiting ─────────────────────────────────────────
API_RATE_LIMIT: int = int(os.getenv("API_RATE_LIMIT", "100"))  # per hour per IP
OTP_RATE_LIMIT: int = int(os.getenv("OTP_RATE_LIMIT", "5"))  # per hour per mobile

# ── Cache ─────────────────────────────────────────────────
CACHE_ENABLED: bool = _env_bool("CACHE_ENABLED", True)
CACHE_LIFETIME: int = int(os.getenv("CACHE_LIFETIME", "3600"))


def get_config(key: str, default: Any = None) -> Any:
    """
    Look up a configuration constant by name.

    Args:
        key: Constant name, e.g. ``"MIN_ORDER_AMOUNT"``.
        default: Returned when no such constant is defined.

    Returns:
        The constant's value, or ``default``.
    """
    if not key.isupper():
        return default
    return globals().get(key, default)


def is_debug_mode() -> bool:
    """Returns True if the application runs in debug mode."""
    return APP_DEBUG is True


def get_base_url(host: Optional[str] = None, https: bool = False) -> str:
    """
    Build the application base URL.

    Args:
        host: Host (and optional port) taken from the incoming request.
            Falls back to APP_URL when not given.
        https: Whether the request came in over TLS.
    """
    if not host:
        return APP_URL.rstrip("/")
    scheme = "https" if https else "http"
    return f"{scheme}://{host}"


def get_file_url(path: str, base_url: Optional[str] = None) -> str:
    """Full public URL of a file path relative to the site root."""
    base = (base_url or get_base_url()).rstrip("/")
    return f"{base}/{path.lstrip('/')}"
