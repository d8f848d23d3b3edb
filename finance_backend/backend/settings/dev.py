# backend/settings/dev.py
"""
PATH: backend/settings/dev.py

LOCAL DEVELOPMENT SETTINGS
- sqlite unless DATABASE_URL is set
- permissive local CORS for the budgeting frontend
- ledger logs at DEBUG unless LOG_LEVEL says otherwise
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, env

DEBUG = True

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])

_LOCAL_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=_LOCAL_ORIGINS)
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=_LOCAL_ORIGINS)
CORS_ALLOW_CREDENTIALS = True

if not env("LOG_LEVEL", default=""):
    LOGGING["loggers"]["ledger"]["level"] = "DEBUG"
