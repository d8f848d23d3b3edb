# users/apps.py

from django.apps import AppConfig


class UsersConfig(AppConfig):
    """Email-first accounts; each user owns one card and one cash ledger account."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "users"
    label = "users"
    verbose_name = "Users & authentication"
