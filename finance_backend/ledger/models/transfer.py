# ledger/models/transfer.py

from __future__ import annotations

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q

from ledger.models.account import Account


class Transfer(models.Model):
    """
    Money moved between the user's own accounts (e.g. card -> cash).

    Owns exactly two ledger entries sharing source_id=transfer.id:
    one `out` on from_account and one `in` on to_account.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="transfers",
    )

    from_account = models.ForeignKey(
        Account,
        on_delete=models.RESTRICT,
        related_name="outgoing_transfers",
    )
    to_account = models.ForeignKey(
        Account,
        on_delete=models.RESTRICT,
        related_name="incoming_transfers",
    )

    amount = models.PositiveBigIntegerField(validators=[MinValueValidator(1)])
    transfer_date = models.DateField()
    note = models.CharField(max_length=500, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-transfer_date", "-created_at"]
        verbose_name = "Transfer"
        verbose_name_plural = "Transfers"
        indexes = [
            models.Index(fields=["user", "transfer_date"], name="ledger_tran_user_id_0e9d37_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(from_account=F("to_account")),
                name="chk_transfer_distinct_accounts",
            ),
        ]

    def __str__(self):
        return f"Transfer {self.amount} {self.from_account_id} -> {self.to_account_id} ({self.transfer_date})"

    def clean(self):
        if self.from_account_id and self.from_account_id == self.to_account_id:
            raise ValidationError("from_account and to_account must differ")

        for field in ("from_account", "to_account"):
            if getattr(self, f"{field}_id") is None:
                continue
            if getattr(self, field).user_id != self.user_id:
                raise ValidationError("Transfer accounts must belong to the transfer user")
