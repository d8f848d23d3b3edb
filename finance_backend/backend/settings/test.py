# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS
- In-memory SQLite (conditional unique constraints are supported)
- Fast password hashing
- Throttling off so API tests are deterministic
- Fixed ledger cutover (tests override per case where needed)
"""

from __future__ import annotations

from datetime import date

from .base import *  # noqa: F403
from .base import REST_FRAMEWORK

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

LEDGER_CUTOVER_DATE = date(2026, 2, 20)
LEDGER_CASH_WITHDRAWAL_PATTERN = "uzcash"
LEDGER_TRANSFER_CATEGORY_ID = "transfers"
