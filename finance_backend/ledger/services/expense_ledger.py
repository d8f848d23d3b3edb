# ledger/services/expense_ledger.py

"""
======================================================
PATH: ledger/services/expense_ledger.py
======================================================
EXPENSE -> LEDGER SYNC

Keeps the single `out` entry of an expense in step with the expense.

Exclusion transitions on update (before.excluded, after.excluded):

    counted  -> excluded : delete the entry on the before-account
    excluded -> counted  : post a fresh entry from the after-state
                           (a leftover entry is rewritten instead)
    excluded -> excluded : nothing
    counted  -> counted  : account changed  -> delete on before-account,
                                               post on after-account
                           fields changed   -> update entry in place
                           otherwise        -> nothing

Callers run these inside the same transaction as the expense write,
so any failure here rolls the expense write back too.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date

from ledger.models import Expense, LedgerEntry
from ledger.services import journal
from ledger.services.account_registry import (
    get_account_id,
    normalize_account_type,
    resolve_payment_account,
)
from ledger.services.exceptions import IdempotencyError, InvalidStateError

logger = logging.getLogger(__name__)

# Outcomes reported by on_expense_updated
NOOP = "noop"
POSTED = "posted"
REMOVED = "removed"
MOVED = "moved"
UPDATED = "updated"


@dataclass(frozen=True)
class ExpenseSnapshot:
    id: uuid.UUID
    user_id: object
    amount: int
    expense_date: date
    merchant: str
    note: str | None
    payment_method: str
    excluded_from_budget: bool

    @classmethod
    def from_expense(cls, expense: Expense) -> "ExpenseSnapshot":
        return cls(
            id=expense.id,
            user_id=expense.user_id,
            amount=expense.amount,
            expense_date=expense.expense_date,
            merchant=expense.merchant,
            note=expense.note,
            payment_method=expense.payment_method,
            excluded_from_budget=bool(expense.excluded_from_budget),
        )

    @property
    def account_type(self) -> str:
        return normalize_account_type(self.payment_method)


def _ledger_fields_changed(before: ExpenseSnapshot, after: ExpenseSnapshot) -> bool:
    return (
        before.amount != after.amount
        or before.expense_date != after.expense_date
        or before.merchant != after.merchant
        or before.note != after.note
    )


def _post_for(snapshot: ExpenseSnapshot, *, user) -> LedgerEntry:
    account = resolve_payment_account(user=user, payment_method=snapshot.payment_method)
    return journal.post_entry(
        account=account,
        direction=LedgerEntry.OUT,
        amount=snapshot.amount,
        occurred_on=snapshot.expense_date,
        source_type=LedgerEntry.SOURCE_EXPENSE,
        source_id=snapshot.id,
        merchant=snapshot.merchant,
        note=snapshot.note,
    )


def _delete_on_account_of(snapshot: ExpenseSnapshot, *, user) -> int:
    account_id = get_account_id(user=user, account_type=snapshot.account_type)
    if account_id is None:
        return 0
    return journal.delete_source_entries(
        source_type=LedgerEntry.SOURCE_EXPENSE,
        source_id=snapshot.id,
        user=user,
        account=account_id,
    )


def _rewrite_entry(snapshot: ExpenseSnapshot, *, user) -> int:
    account = resolve_payment_account(user=user, payment_method=snapshot.payment_method)
    return journal.update_source_entries(
        source_type=LedgerEntry.SOURCE_EXPENSE,
        source_id=snapshot.id,
        account=account,
        amount=snapshot.amount,
        occurred_on=snapshot.expense_date,
        merchant=snapshot.merchant,
        note=snapshot.note,
    )


def on_expense_created(expense: Expense) -> LedgerEntry | None:
    """Post the expense's `out` entry unless it is excluded from the budget."""
    snapshot = ExpenseSnapshot.from_expense(expense)
    if snapshot.excluded_from_budget:
        return None
    return _post_for(snapshot, user=expense.user)


def _counted_to_excluded(before, after, *, user) -> str:
    _delete_on_account_of(before, user=user)
    return REMOVED


def _excluded_to_counted(before, after, *, user) -> str:
    try:
        _post_for(after, user=user)
    except IdempotencyError:
        logger.warning(
            "Excluded expense still had a ledger entry; rewriting it",
            extra={"expense_id": str(after.id)},
        )
        _rewrite_entry(after, user=user)
        return UPDATED
    return POSTED


def _excluded_to_excluded(before, after, *, user) -> str:
    return NOOP


def _counted_to_counted(before, after, *, user) -> str:
    if before.account_type != after.account_type:
        _delete_on_account_of(before, user=user)
        _post_for(after, user=user)
        return MOVED

    if not _ledger_fields_changed(before, after):
        return NOOP

    if _rewrite_entry(after, user=user) == 0:
        logger.warning(
            "Counted expense had no ledger entry; re-posting",
            extra={"expense_id": str(after.id)},
        )
        _post_for(after, user=user)
        return POSTED
    return UPDATED


EXCLUSION_TRANSITIONS = {
    (False, True): _counted_to_excluded,
    (True, False): _excluded_to_counted,
    (True, True): _excluded_to_excluded,
    (False, False): _counted_to_counted,
}


def on_expense_updated(*, user, before: ExpenseSnapshot, after: ExpenseSnapshot) -> str:
    if before.id != after.id:
        raise InvalidStateError("before/after snapshots belong to different expenses")
    if before.user_id != user.pk or after.user_id != user.pk:
        raise InvalidStateError("Expense does not belong to user")

    handler = EXCLUSION_TRANSITIONS[(before.excluded_from_budget, after.excluded_from_budget)]
    outcome = handler(before, after, user=user)

    logger.info(
        "Expense ledger synced",
        extra={"expense_id": str(after.id), "outcome": outcome},
    )
    return outcome


def on_expense_deleted(*, user, expense_id) -> int:
    """Remove every entry of the expense. Raises StorageFailureError on failure."""
    return journal.delete_source_entries(
        source_type=LedgerEntry.SOURCE_EXPENSE,
        source_id=expense_id,
        user=user,
    )
