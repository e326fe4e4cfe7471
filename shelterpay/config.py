from __future__ import annotations

"""Application configuration.

Values are read from the process environment once at import time. `server.py`
loads a local `.env` (if present) before this module is imported, so the same
keys work for development and for injected production secrets.
"""

import os


def _env_flag(name: str, default: bool = True) -> bool:
    """Read a boolean-like flag from environment.

    Accepted falsy values: "0", "false", "off", "no" (case-insensitive).
    Anything else (or unset) falls back to `default`.
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in {"0", "false", "off", "no"}:
        return False
    if value in {"1", "true", "on", "yes"}:
        return True
    return default


# Application constants
APP_NAME = "Shelter Payments API"
APP_VERSION = "1.0.0"
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*").split(",")

MONGO_URL = os.environ.get("MONGO_URL", "")
DB_NAME = os.environ.get("DB_NAME", "shelterpay")
MONGO_SERVER_SELECTION_TIMEOUT_MS = int(os.environ.get("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000"))

BOOKINGS_COLLECTION = "bookings"
BOOKING_CURRENCY = "EGP"

ENABLE_ACCESS_LOG: bool = _env_flag("ENABLE_ACCESS_LOG", default=True)


# Paymob Accept configuration
PAYMOB_BASE_URL = os.environ.get("PAYMOB_BASE_URL", "https://accept.paymob.com/api")
PAYMOB_IFRAME_BASE_URL = os.environ.get(
    "PAYMOB_IFRAME_BASE_URL", "https://accept.paymob.com/api/acceptance/iframes"
)
PAYMOB_API_KEY = os.environ.get("PAYMOB_API_KEY", "")
PAYMOB_INTEGRATION_ID = os.environ.get("PAYMOB_INTEGRATION_ID", "")
PAYMOB_IFRAME_ID = os.environ.get("PAYMOB_IFRAME_ID", "")
PAYMOB_TIMEOUT_SECONDS = float(os.environ.get("PAYMOB_TIMEOUT_SECONDS", "10"))
PAYMOB_PAYMENT_KEY_EXPIRATION = int(os.environ.get("PAYMOB_PAYMENT_KEY_EXPIRATION", "3600"))
