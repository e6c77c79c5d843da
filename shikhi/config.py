# shikhi/config.py
import os
from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _list_env(name: str, default: list) -> list:
    value = os.getenv(name)
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


# ---------------------------
# APPLICATION
# ---------------------------
APP_NAME = "Japanese Shikhi API"
APP_VERSION = "1.0.0"
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = _list_env(
    "CORS_ORIGINS",
    [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
)

# ---------------------------
# DATABASE
# ---------------------------
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DB = os.getenv("MONGODB_DB", "japanese_shikhi")
MONGODB_MAX_POOL_SIZE = _int_env("MONGODB_MAX_POOL_SIZE", 10)
MONGODB_MIN_POOL_SIZE = _int_env("MONGODB_MIN_POOL_SIZE", 1)
MONGODB_MAX_IDLE_TIME_MS = _int_env("MONGODB_MAX_IDLE_TIME_MS", 30000)
MONGODB_SERVER_SELECTION_TIMEOUT_MS = _int_env("MONGODB_SERVER_SELECTION_TIMEOUT_MS", 5000)

# ---------------------------
# AUTH / IDENTITY PROVIDER
# ---------------------------
AUTH_JWT_KEY = os.getenv("AUTH_JWT_KEY", "")
AUTH_JWT_ALGORITHMS = _list_env("AUTH_JWT_ALGORITHMS", ["RS256"])
AUTH_JWT_ISSUER = os.getenv("AUTH_JWT_ISSUER") or None

IDENTITY_API_URL = os.getenv("IDENTITY_API_URL", "https://api.clerk.com/v1").rstrip("/")
IDENTITY_API_KEY = os.getenv("IDENTITY_API_KEY", "")
IDENTITY_API_TIMEOUT_SECONDS = _int_env("IDENTITY_API_TIMEOUT_SECONDS", 10)

# ---------------------------
# CALLING (AGORA)
# ---------------------------
AGORA_APP_ID = os.getenv("AGORA_APP_ID", "")
AGORA_APP_CERTIFICATE = os.getenv("AGORA_APP_CERTIFICATE", "")
CALL_TOKEN_TTL_SECONDS = _int_env("CALL_TOKEN_TTL_SECONDS", 3600)

# ---------------------------
# PER-PROCESS CACHE / RATE LIMIT
# ---------------------------
RATE_LIMIT_MAX_REQUESTS = _int_env("RATE_LIMIT_MAX_REQUESTS", 100)
RATE_LIMIT_WINDOW_SECONDS = _int_env("RATE_LIMIT_WINDOW_SECONDS", 60)
CACHE_SWEEP_INTERVAL_SECONDS = _int_env("CACHE_SWEEP_INTERVAL_SECONDS", 60)
COURSE_CACHE_TTL_SECONDS = _int_env("COURSE_CACHE_TTL_SECONDS", 600)
