# ledger/models/ledger.py

"""
======================================================
PATH: ledger/models/ledger.py
======================================================
LEDGER ENTRY MODEL

One dated, signed movement against one account, tagged with the source
record that caused it.

Guarantees:
- Amount is always positive; direction (in/out) carries the sign
- user always equals account.user (denormalized for scoping)
- Non-transfer sources own at most one entry per account
  (source_type, source_id, account); duplicates fail at the database
- A transfer owns at most one leg per direction
  (source_type, source_id, direction)
- Entries are written only by ledger.services.journal
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from ledger.models.account import Account


class LedgerEntry(models.Model):
    IN = "in"
    OUT = "out"

    DIRECTIONS = [
        (IN, "In"),
        (OUT, "Out"),
    ]

    SOURCE_EXPENSE = "expense"
    SOURCE_TRANSFER = "transfer"
    SOURCE_SALARY_PAYMENT = "salary_payment"
    SOURCE_CASH_WITHDRAWAL = "cash_withdrawal"

    SOURCE_TYPES = [
        (SOURCE_EXPENSE, "Expense"),
        (SOURCE_TRANSFER, "Transfer"),
        (SOURCE_SALARY_PAYMENT, "Salary payment"),
        (SOURCE_CASH_WITHDRAWAL, "Cash withdrawal"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="ledger_entries",
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.RESTRICT,
        related_name="ledger_entries",
    )

    direction = models.CharField(max_length=3, choices=DIRECTIONS)

    amount = models.PositiveBigIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Positive amount in the smallest currency unit",
    )

    occurred_on = models.DateField()

    source_type = models.CharField(max_length=20, choices=SOURCE_TYPES)
    source_id = models.UUIDField()

    merchant = models.CharField(max_length=255, null=True, blank=True)
    note = models.CharField(max_length=500, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Ledger Entry"
        verbose_name_plural = "Ledger Entries"
        ordering = ["-occurred_on", "-created_at"]
        indexes = [
            models.Index(fields=["user", "occurred_on"], name="ledger_ledg_user_id_6d1f0a_idx"),
            models.Index(fields=["account", "occurred_on"], name="ledger_ledg_account_9c2b5e_idx"),
            models.Index(fields=["source_type", "source_id"], name="ledger_ledg_source__4e8a71_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["source_type", "source_id", "account"],
                condition=~Q(source_type="transfer"),
                name="uniq_ledger_source_account",
            ),
            models.UniqueConstraint(
                fields=["source_type", "source_id", "direction"],
                condition=Q(source_type="transfer"),
                name="uniq_ledger_transfer_leg",
            ),
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_ledger_amount_positive",
            ),
            models.CheckConstraint(
                condition=Q(direction__in=["in", "out"]),
                name="chk_ledger_direction",
            ),
        ]

    def __str__(self):
        sign = "+" if self.direction == self.IN else "-"
        return f"{sign}{self.amount} {self.account_id} {self.source_type}:{self.source_id}"

    @property
    def signed_amount(self) -> int:
        return self.amount if self.direction == self.IN else -self.amount

    def clean(self):
        if self.direction not in (self.IN, self.OUT):
            raise ValidationError("Invalid direction")

        if self.amount is None or self.amount <= 0:
            raise ValidationError("Ledger amount must be > 0")

        if self.account_id and self.user_id and self.account.user_id != self.user_id:
            raise ValidationError("Ledger entry account must belong to the entry user")

    def save(self, *args, **kwargs):
        # Source uniqueness is enforced by the database (idempotent postings
        # rely on the IntegrityError), not by model validation.
        self.full_clean(validate_unique=False, validate_constraints=False)
        return super().save(*args, **kwargs)
