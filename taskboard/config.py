# taskboard/config.py
# Environment-aware configuration for the Taskboard permissions service

import os
from typing import Literal

# Environment detection
ENV: Literal["dev", "staging", "prod"] = os.environ.get("ENV", "dev")  # type: ignore
IS_DEV = (ENV == "dev")
IS_STAGING = (ENV == "staging")
IS_PROD = (ENV == "prod")

# JWT verification (tokens are issued by the identity provider, we only read them)
SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")
ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")

# Database configuration
DATABASE_PATH = os.environ.get("DATABASE_PATH", "taskboard.db")

# CORS origins (expand for staging/prod)
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

if IS_STAGING or IS_PROD:
    extra_origins = os.environ.get("CORS_ORIGINS", "")
    if extra_origins:
        CORS_ORIGINS.extend(origin.strip() for origin in extra_origins.split(",") if origin.strip())

# Permission cache
# Entries are invalidated explicitly on membership/grant changes; the TTL only
# bounds staleness for changes nobody reported.
PERMISSION_CACHE_TTL_SECONDS = int(os.environ.get("PERMISSION_CACHE_TTL_SECONDS", "300"))
PERMISSION_CACHE_MAX_ENTRIES = int(os.environ.get("PERMISSION_CACHE_MAX_ENTRIES", "1000"))

if IS_DEV:
    print(f"[CONFIG] Environment: {ENV}")
    print(f"[CONFIG] Database: {DATABASE_PATH}")
    print(f"[CONFIG] Permission cache: ttl={PERMISSION_CACHE_TTL_SECONDS}s, "
          f"max_entries={PERMISSION_CACHE_MAX_ENTRIES}")
