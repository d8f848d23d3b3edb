"""
PATH: users/models/user.py

CUSTOM USER MODEL

- Registration can accept BOTH username + email (recommended).
- Registration can also accept ONLY username (email auto-generated) OR ONLY email (username auto-generated).
- Login allows EITHER username OR email (not both), enforced by the custom auth backend.

The ledger app treats a User purely as an owner: every account, source record
and ledger entry is scoped by it.
"""

from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models


# ---------------- USER MANAGER ----------------
class UserManager(BaseUserManager):
    def _unique_username_from(self, email: str, fallback: str) -> str:
        base = (email.split("@")[0] or fallback).strip().lower()
        candidate = base
        i = 1
        while self.model.objects.filter(username__iexact=candidate).exists():
            i += 1
            candidate = f"{base}{i}"
        return candidate

    def create_user(self, email=None, password=None, **extra_fields):
        """
        Supports:
        - create_user(email="a@b.com", password="x", username="john")
        - create_user(username="john", password="x")
        - create_user(email="a@b.com", password="x")

        Rules:
        - Must provide at least one of: email or username.
        - If email missing but username present: email becomes <username>@local.test
        - If username missing but email present: username becomes email local-part (uniqueness ensured)
        """
        username = (extra_fields.get("username") or "").strip()
        email = (email or extra_fields.get("email") or "").strip()

        if not email and not username:
            raise ValueError("Provide at least email or username")

        if not email and username:
            email = f"{username.lower()}@local.test"

        email = self.normalize_email(email)

        if email and not username:
            username = self._unique_username_from(email, "user")

        extra_fields["email"] = email
        extra_fields["username"] = username
        extra_fields.setdefault("is_active", True)

        user = self.model(**extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.full_clean(exclude=["password"])
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("Superuser must have an email")
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True")

        if not (extra_fields.get("username") or "").strip():
            extra_fields["username"] = self._unique_username_from(
                self.normalize_email(email), "admin"
            )

        return self.create_user(email=email, password=password, **extra_fields)


# ---------------- USER MODEL ----------------
class User(AbstractBaseUser, PermissionsMixin):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    username = models.CharField(max_length=150, unique=True)

    # Canonical identity
    email = models.EmailField(unique=True)

    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []  # username is auto-derived if missing

    class Meta:
        ordering = ["-created_at"]

    def clean(self):
        if self.email:
            self.email = self.__class__.objects.normalize_email(self.email).strip()
        self.username = (self.username or "").strip()

        if not self.email and not self.username:
            raise ValidationError("User must have at least email or username")

    def __str__(self):
        return self.username or self.email
