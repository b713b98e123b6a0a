"""sweetshop configuration.

Everything the service depends on is read from environment variables here, so
the same code runs locally, in tests and in a container. A `.env` file in the
working directory is loaded first if it exists.

Defaults are meant for development. Override them in any real deployment,
JWT_SECRET above all.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

# --- Storage -----------------------------------------------------------------
# "memory" keeps everything in-process (tests, demos); "mongo" uses MongoDB.
STORE_BACKEND: str = os.getenv("STORE_BACKEND", "memory").lower()

MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB: str = os.getenv("MONGO_DB", "sweetshop")
SWEETS_COLLECTION: str = os.getenv("SWEETS_COLLECTION", "sweets")
USERS_COLLECTION: str = os.getenv("USERS_COLLECTION", "users")

# How long pymongo waits for a reachable server before giving up (ms).
MONGO_TIMEOUT_MS: int = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

# --- Auth --------------------------------------------------------------------
JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
# 7 days
JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", str(7 * 24 * 60)))

# --- HTTP --------------------------------------------------------------------
# Comma separated. "*" allows every origin.
CORS_ORIGINS: list[str] = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001").split(",")
    if o.strip()
]

# --- Logging -----------------------------------------------------------------
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
