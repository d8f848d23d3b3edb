# PATH: ledger/services/withdrawal_service.py

"""
CASH WITHDRAWAL CONVERSION

An ATM withdrawal often arrives as a card "expense". Converting it:

  1) create a card -> cash Transfer (and its two entries)
  2) remove the expense's `out` entry, mark the expense excluded and
     re-tag its origin as cash_withdrawal

Both steps share one transaction. Step 2 never runs if step 1 fails.
Net effect: card balance unchanged, cash balance + amount, budget no
longer counts the withdrawal.
"""

from __future__ import annotations

import logging
import re

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from ledger.models import Expense, Transfer
from ledger.services.account_registry import ensure_accounts
from ledger.services.exceptions import (
    InvalidStateError,
    NotFoundError,
    StorageFailureError,
)
from ledger.services.expense_ledger import on_expense_deleted
from ledger.services.transfer_service import create_transfer

logger = logging.getLogger(__name__)

CASH_WITHDRAWAL_NOTE = "Cash withdrawal"

# Legal-form tokens and quotes that carry no merchant identity.
_LEGAL_FORM_PATTERNS = [
    re.compile(r"\bООО\b", re.IGNORECASE),
    re.compile(r"\bOOO\b", re.IGNORECASE),
    re.compile(r"\bLLC\b", re.IGNORECASE),
    re.compile(r"\bL\.?L\.?C\.?(?!\w)", re.IGNORECASE),
    re.compile(r"\bИП\b", re.IGNORECASE),
    re.compile(r"\bIP\b", re.IGNORECASE),
    re.compile(r"[\"'«»]"),
]
_WHITESPACE = re.compile(r"\s+")


def normalize_merchant(merchant: str | None) -> str:
    if not merchant or not isinstance(merchant, str):
        return ""
    value = merchant.strip()
    for pattern in _LEGAL_FORM_PATTERNS:
        value = pattern.sub(" ", value)
    return _WHITESPACE.sub(" ", value).strip().lower()


def is_withdrawal_candidate(expense: Expense) -> bool:
    pattern = getattr(settings, "LEDGER_CASH_WITHDRAWAL_PATTERN", "uzcash")
    transfer_category = getattr(settings, "LEDGER_TRANSFER_CATEGORY_ID", "transfers")

    merchant = normalize_merchant(expense.merchant) or (expense.merchant or "")
    if re.search(pattern, merchant, re.IGNORECASE):
        return True

    return expense.category_id == transfer_category and bool(expense.excluded_from_budget)


@transaction.atomic
def convert_expense_to_withdrawal(*, user, expense_id) -> Transfer:
    try:
        expense = Expense.objects.select_for_update().get(id=expense_id, user=user)
    except (Expense.DoesNotExist, ValidationError) as exc:
        raise NotFoundError("Expense not found") from exc
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to read expense: {exc}") from exc

    if expense.origin == Expense.ORIGIN_CASH_WITHDRAWAL:
        raise InvalidStateError("Expense was already converted to a cash withdrawal")

    if not is_withdrawal_candidate(expense):
        raise InvalidStateError(
            "Only cash-withdrawal merchants or excluded transfers can be converted"
        )

    accounts = ensure_accounts(user=user)

    # Step 1: the transfer and both of its entries.
    transfer = create_transfer(
        user=user,
        from_account_id=accounts.card_id,
        to_account_id=accounts.cash_id,
        amount=expense.amount,
        transfer_date=expense.expense_date,
        note=CASH_WITHDRAWAL_NOTE,
    )

    # Step 2: the expense stops counting.
    on_expense_deleted(user=user, expense_id=expense.id)
    expense.excluded_from_budget = True
    expense.origin = Expense.ORIGIN_CASH_WITHDRAWAL
    try:
        expense.save(update_fields=["excluded_from_budget", "origin", "updated_at"])
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to update expense: {exc}") from exc

    logger.info(
        "Expense converted to cash withdrawal",
        extra={
            "expense_id": str(expense.id),
            "transfer_id": str(transfer.id),
            "amount": expense.amount,
        },
    )
    return transfer
