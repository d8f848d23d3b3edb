# ledger/models/account.py

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Account(models.Model):
    """
    One of the two money accounts every user owns (card, cash).

    Guarantees:
    - Exactly one account per (user, account_type), enforced by the database
    - Never deleted; only opening_balance (via balance correction) and
      updated_at change after creation
    - opening_balance is in the smallest currency unit and already reflects
      all activity strictly before the ledger cutover date
    """

    CARD = "card"
    CASH = "cash"

    ACCOUNT_TYPES = [
        (CARD, "Card"),
        (CASH, "Cash"),
    ]

    DEFAULT_NAMES = {
        CARD: "Card",
        CASH: "Cash",
    }

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="ledger_accounts",
    )

    account_type = models.CharField(max_length=10, choices=ACCOUNT_TYPES)
    name = models.CharField(max_length=100)

    opening_balance = models.BigIntegerField(
        default=0,
        help_text="Balance as of the ledger cutover date (smallest currency unit)",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["account_type"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "account_type"],
                name="uniq_account_user_type",
            ),
            models.CheckConstraint(
                condition=Q(account_type__in=["card", "cash"]),
                name="chk_account_type_card_or_cash",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.account_type})"

    def clean(self):
        self.name = (self.name or "").strip() or self.DEFAULT_NAMES.get(self.account_type, "")
        if self.account_type not in self.DEFAULT_NAMES:
            raise ValidationError("account_type must be 'card' or 'cash'")

    def save(self, *args, **kwargs):
        # (user, account_type) uniqueness is left to the database so that
        # concurrent creators see an IntegrityError and re-read.
        self.full_clean(validate_unique=False, validate_constraints=False)
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Accounts cannot be deleted")
