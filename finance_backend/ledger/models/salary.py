# ledger/models/salary.py

from __future__ import annotations

import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class SalaryPayment(models.Model):
    """
    A salary payout. Once received it owns exactly one `in` entry on the
    card account (source_type=salary_payment).

    The forecast that produced `amount` lives outside the ledger; only the
    final (amount, pay_date) is consumed here.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="salary_payments",
    )

    period = models.CharField(max_length=32, help_text="Payroll period label, e.g. 2026-02/1")
    pay_date = models.DateField()
    amount = models.PositiveBigIntegerField(validators=[MinValueValidator(1)])
    received = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-pay_date", "-created_at"]
        verbose_name = "Salary Payment"
        verbose_name_plural = "Salary Payments"
        indexes = [
            models.Index(fields=["user", "pay_date"], name="ledger_sala_user_id_5b7e90_idx"),
            models.Index(fields=["user", "received"], name="ledger_sala_user_id_a41c2f_idx"),
        ]

    def __str__(self):
        state = "received" if self.received else "pending"
        return f"Salary {self.period} {self.amount} ({state})"
