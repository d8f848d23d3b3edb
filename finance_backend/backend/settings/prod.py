# backend/settings/prod.py
"""
PATH: backend/settings/prod.py

PRODUCTION SETTINGS (fail closed)

- DEBUG forced off; SECRET_KEY and ALLOWED_HOSTS required
- Postgres only: expense updates rely on SELECT ... FOR UPDATE and the
  ledger relies on partial unique constraints
- LEDGER_CUTOVER_DATE must be set explicitly; every balance is anchored on it
- WhiteNoise serves collected static files (admin, Swagger UI)
- CORS/CSRF origins explicit and https-only
"""

from __future__ import annotations

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403
from .base import BASE_DIR, MIDDLEWARE, env  # explicit for Ruff (F405)

DEBUG = False


def _required(name: str) -> str:
    value = (env(name, default="") or "").strip()
    if not value:
        raise ImproperlyConfigured(f"{name} must be set in production.")
    return value


def _https_origins(name: str) -> list[str]:
    origins = env.list(name, default=[])
    if not origins:
        raise ImproperlyConfigured(f"{name} must be set in production.")
    for origin in origins:
        if "localhost" in origin or "127.0.0.1" in origin:
            raise ImproperlyConfigured(f"Remove localhost from {name} in production.")
        if not origin.startswith("https://"):
            raise ImproperlyConfigured(f"{name} must be https:// in production.")
    return origins


# ----------------------------
# Secrets & hosts
# ----------------------------
SECRET_KEY = _required("SECRET_KEY")
if SECRET_KEY == "dev-insecure-change-me":
    raise ImproperlyConfigured("SECRET_KEY must be set to a strong value in production.")

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=[])
if not ALLOWED_HOSTS:
    raise ImproperlyConfigured("ALLOWED_HOSTS must be set in production.")

# ----------------------------
# Database (Postgres only)
# ----------------------------
if not _required("DATABASE_URL").startswith(("postgres://", "postgresql://", "pgsql://")):
    raise ImproperlyConfigured("DATABASE_URL must point at Postgres in production.")

DATABASES = {"default": env.db("DATABASE_URL")}
DATABASES["default"]["CONN_MAX_AGE"] = env.int("DB_CONN_MAX_AGE", default=60)

# ----------------------------
# Ledger
# ----------------------------
_required("LEDGER_CUTOVER_DATE")

# ----------------------------
# Static files (WhiteNoise)
# ----------------------------
STATIC_ROOT = env("STATIC_ROOT", default=str(BASE_DIR / "staticfiles"))
MIDDLEWARE.insert(1, "whitenoise.middleware.WhiteNoiseMiddleware")
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

# ----------------------------
# TLS behind a proxy
# ----------------------------
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", default=True)
SECURE_HSTS_SECONDS = env.int("SECURE_HSTS_SECONDS", default=3600)
SECURE_HSTS_INCLUDE_SUBDOMAINS = env.bool("SECURE_HSTS_INCLUDE_SUBDOMAINS", default=True)
SECURE_HSTS_PRELOAD = env.bool("SECURE_HSTS_PRELOAD", default=False)

# Sessions/CSRF cookies only matter for the admin; the API is JWT.
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_HTTPONLY = True
CSRF_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = "Lax"
CSRF_COOKIE_SAMESITE = "Lax"

SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "same-origin"
SECURE_CROSS_ORIGIN_OPENER_POLICY = "same-origin"
X_FRAME_OPTIONS = "DENY"

# ----------------------------
# CORS / CSRF
# ----------------------------
CORS_ALLOWED_ORIGINS = _https_origins("CORS_ALLOWED_ORIGINS")
CSRF_TRUSTED_ORIGINS = _https_origins("CSRF_TRUSTED_ORIGINS")
CORS_ALLOW_CREDENTIALS = False
