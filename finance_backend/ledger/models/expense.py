# ledger/models/expense.py

from __future__ import annotations

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Expense(models.Model):
    """
    Expense (source record). Owns at most one `out` ledger entry.

    Rule:
    - excluded_from_budget=False -> exactly one out entry on the account
      selected by payment_method
    - excluded_from_budget=True  -> no ledger entry at all
    - Keeping the entry in sync is the job of ledger.services.expense_ledger;
      never write expenses without going through ledger.services.expense_service
    """

    PAYMENT_CARD = "card"
    PAYMENT_CASH = "cash"

    PAYMENT_METHODS = [
        (PAYMENT_CARD, "Card"),
        (PAYMENT_CASH, "Cash"),
    ]

    ORIGIN_MANUAL = "manual"
    ORIGIN_IMPORT = "import"
    ORIGIN_ASSISTANT = "assistant"
    ORIGIN_CASH_WITHDRAWAL = "cash_withdrawal"

    ORIGINS = [
        (ORIGIN_MANUAL, "Manual entry"),
        (ORIGIN_IMPORT, "Statement import"),
        (ORIGIN_ASSISTANT, "Assistant"),
        (ORIGIN_CASH_WITHDRAWAL, "Converted to cash withdrawal"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="expenses",
    )

    amount = models.PositiveBigIntegerField(validators=[MinValueValidator(1)])
    expense_date = models.DateField(default=timezone.localdate)

    merchant = models.CharField(max_length=255)
    note = models.CharField(max_length=500, null=True, blank=True)

    category_id = models.CharField(max_length=64)

    payment_method = models.CharField(
        max_length=10,
        choices=PAYMENT_METHODS,
        default=PAYMENT_CARD,
    )

    excluded_from_budget = models.BooleanField(default=False)

    origin = models.CharField(max_length=20, choices=ORIGINS, default=ORIGIN_MANUAL)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-expense_date", "-created_at"]
        verbose_name = "Expense"
        verbose_name_plural = "Expenses"
        indexes = [
            models.Index(fields=["user", "expense_date"], name="ledger_expe_user_id_3c6a1e_idx"),
            models.Index(fields=["user", "category_id"], name="ledger_expe_user_id_8f2d4b_idx"),
        ]

    def __str__(self):
        return f"Expense {self.merchant} - {self.amount} ({self.expense_date})"

    def clean(self):
        self.merchant = (self.merchant or "").strip()
        if not self.merchant:
            raise ValidationError("merchant is required")

        self.category_id = (self.category_id or "").strip()
        if not self.category_id:
            raise ValidationError("category_id is required")

        if self.note is not None:
            self.note = self.note.strip() or None
