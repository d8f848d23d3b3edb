# PATH: ledger/services/expense_service.py

"""
EXPENSE SERVICE

Responsibilities:
- Validate and write Expense source records
- Run the expense -> ledger protocol in the SAME transaction as the write
- Best-effort bulk delete (per-id transactions, failures reported)

Every producer of expenses (manual entry, statement import, assistant)
must come through create_expense so the ledger stays in step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from ledger.models import Expense
from ledger.services.expense_ledger import (
    ExpenseSnapshot,
    on_expense_created,
    on_expense_deleted,
    on_expense_updated,
)
from ledger.services.exceptions import (
    InvalidStateError,
    LedgerServiceError,
    NotFoundError,
    StorageFailureError,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "amount",
    "expense_date",
    "merchant",
    "note",
    "category_id",
    "payment_method",
    "excluded_from_budget",
)


def is_budget_excluded_category(category_id: str | None) -> bool:
    reserved = getattr(settings, "LEDGER_TRANSFER_CATEGORY_ID", "transfers")
    return (category_id or "").strip() == reserved


def _validated_save(expense: Expense) -> None:
    try:
        expense.full_clean()
        expense.save()
    except ValidationError as exc:
        raise InvalidStateError("; ".join(exc.messages)) from exc
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to save expense: {exc}") from exc


def _get_owned_expense(*, user, expense_id, for_update: bool = False) -> Expense:
    qs = Expense.objects.filter(user=user)
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(id=expense_id)
    except (Expense.DoesNotExist, ValidationError) as exc:
        raise NotFoundError("Expense not found") from exc
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to read expense: {exc}") from exc


@transaction.atomic
def create_expense(
    *,
    user,
    amount: int,
    merchant: str,
    category_id: str,
    expense_date: date | None = None,
    note: str | None = None,
    payment_method: str = Expense.PAYMENT_CARD,
    excluded_from_budget: bool | None = None,
    origin: str = Expense.ORIGIN_MANUAL,
) -> Expense:
    """
    Create the expense and its `out` entry atomically.

    excluded_from_budget defaults to True only for the reserved transfer
    category.
    """
    if excluded_from_budget is None:
        excluded_from_budget = is_budget_excluded_category(category_id)

    expense = Expense(
        user=user,
        amount=amount,
        merchant=merchant,
        category_id=category_id,
        note=note,
        payment_method=payment_method,
        excluded_from_budget=excluded_from_budget,
        origin=origin,
    )
    if expense_date is not None:
        expense.expense_date = expense_date

    _validated_save(expense)
    on_expense_created(expense)

    logger.info(
        "Expense created",
        extra={
            "expense_id": str(expense.id),
            "amount": expense.amount,
            "payment_method": expense.payment_method,
            "excluded_from_budget": expense.excluded_from_budget,
        },
    )
    return expense


@transaction.atomic
def update_expense(*, user, expense_id, **changes) -> Expense:
    """
    Apply `changes` and re-sync the ledger in one transaction.

    Moving into the reserved transfer category excludes the expense unless
    excluded_from_budget is passed explicitly. Moving out of it leaves the
    flag alone.
    """
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise InvalidStateError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    # Row lock serializes concurrent edits of the same expense so the
    # before-snapshot is never stale.
    expense = _get_owned_expense(user=user, expense_id=expense_id, for_update=True)
    before = ExpenseSnapshot.from_expense(expense)

    if "excluded_from_budget" in changes and changes["excluded_from_budget"] is None:
        del changes["excluded_from_budget"]
    if (
        "excluded_from_budget" not in changes
        and "category_id" in changes
        and changes["category_id"] != expense.category_id
        and is_budget_excluded_category(changes["category_id"])
    ):
        changes["excluded_from_budget"] = True

    for name, value in changes.items():
        setattr(expense, name, value)

    _validated_save(expense)
    after = ExpenseSnapshot.from_expense(expense)
    on_expense_updated(user=user, before=before, after=after)
    return expense


@transaction.atomic
def delete_expense(*, user, expense_id) -> None:
    """Entries first, then the record; an entry failure keeps the expense."""
    expense = _get_owned_expense(user=user, expense_id=expense_id, for_update=True)
    on_expense_deleted(user=user, expense_id=expense.id)

    try:
        expense.delete()
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to delete expense: {exc}") from exc

    logger.info("Expense deleted", extra={"expense_id": str(expense_id)})


@dataclass
class BulkDeleteResult:
    deleted: list[str] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        return {
            "deleted": self.deleted,
            "not_found": self.not_found,
            "failed": self.failed,
            "ok": self.ok,
        }


def bulk_delete_expenses(*, user, expense_ids) -> BulkDeleteResult:
    """
    Delete each expense in its own transaction.

    A failure on one id is recorded and the sweep continues.
    """
    limit = getattr(settings, "LEDGER_BULK_DELETE_MAX", 500)
    ids = [str(i) for i in dict.fromkeys(expense_ids or [])]
    if len(ids) > limit:
        raise InvalidStateError(f"Too many ids (max {limit})")

    result = BulkDeleteResult()
    for expense_id in ids:
        try:
            delete_expense(user=user, expense_id=expense_id)
        except NotFoundError:
            result.not_found.append(expense_id)
        except LedgerServiceError as exc:
            logger.warning(
                "Bulk delete: expense not deleted",
                extra={"expense_id": expense_id, "error": str(exc)},
            )
            result.failed[expense_id] = str(exc)
        else:
            result.deleted.append(expense_id)

    return result
