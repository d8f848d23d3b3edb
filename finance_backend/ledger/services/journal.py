# ledger/services/journal.py

"""
======================================================
PATH: ledger/services/journal.py
======================================================
LEDGER JOURNAL (ENTRY WRITER)

This module is the ONLY place allowed to:
- Create LedgerEntry rows
- Update LedgerEntry rows in place
- Delete LedgerEntry rows

Mutation protocols (expense, transfer, salary, withdrawal) call in here;
nothing else touches LedgerEntry.objects for writes.

Error contract:
- Bad input (amount <= 0, unknown direction, foreign account) -> InvalidStateError
- Same source already posted on that account/leg               -> IdempotencyError
- Any other database failure                                    -> StorageFailureError
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date

from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction

from ledger.models import Account, LedgerEntry
from ledger.services.exceptions import (
    IdempotencyError,
    InvalidStateError,
    StorageFailureError,
)

logger = logging.getLogger(__name__)


def _positive_amount(value) -> int:
    if isinstance(value, bool):
        raise InvalidStateError(f"Invalid amount: {value!r}")
    try:
        amount = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidStateError(f"Invalid amount: {value!r}") from exc

    if amount != value and not isinstance(value, str):
        raise InvalidStateError(f"Amount must be a whole number of minor units: {value!r}")
    if amount <= 0:
        raise InvalidStateError("Ledger amount must be > 0")
    return amount


def _direction(value: str) -> str:
    if value not in (LedgerEntry.IN, LedgerEntry.OUT):
        raise InvalidStateError(f"Invalid direction: {value!r}")
    return value


@contextmanager
def _storage_errors(action: str, **context):
    try:
        yield
    except DatabaseError as exc:
        logger.exception("Ledger storage failure", extra={"action": action, **context})
        raise StorageFailureError(f"Failed to {action}: {exc}") from exc


def _source_filter(*, source_type: str, source_id, user=None, account=None, direction=None) -> dict:
    filters = {"source_type": source_type, "source_id": source_id}
    if user is not None:
        filters["user"] = user
    if account is not None:
        filters["account"] = account
    if direction is not None:
        filters["direction"] = direction
    return filters


def find_source_entries(*, source_type: str, source_id, user=None, account=None, direction=None):
    """Entries owned by one source record, optionally narrowed to an account or leg."""
    filters = _source_filter(
        source_type=source_type,
        source_id=source_id,
        user=user,
        account=account,
        direction=direction,
    )
    with _storage_errors("read ledger entries", source_type=source_type, source_id=str(source_id)):
        return list(LedgerEntry.objects.filter(**filters).select_related("account"))


def post_entry(
    *,
    account: Account,
    direction: str,
    amount,
    occurred_on: date,
    source_type: str,
    source_id,
    merchant: str | None = None,
    note: str | None = None,
) -> LedgerEntry:
    """
    Insert one entry for `source_type:source_id` on `account`.

    The insert runs inside its own savepoint so a duplicate can be reported
    without poisoning the caller's transaction.
    """
    if account is None:
        raise InvalidStateError("Ledger entry requires an account")
    if occurred_on is None:
        raise InvalidStateError("Ledger entry requires occurred_on")

    amount = _positive_amount(amount)
    direction = _direction(direction)

    entry = LedgerEntry(
        user_id=account.user_id,
        account=account,
        direction=direction,
        amount=amount,
        occurred_on=occurred_on,
        source_type=source_type,
        source_id=source_id,
        merchant=merchant,
        note=note,
    )

    try:
        with transaction.atomic():
            entry.save()
    except ValidationError as exc:
        raise InvalidStateError("; ".join(exc.messages)) from exc
    except IntegrityError as exc:
        duplicate = _source_filter(
            source_type=source_type,
            source_id=source_id,
            direction=direction if source_type == LedgerEntry.SOURCE_TRANSFER else None,
            account=None if source_type == LedgerEntry.SOURCE_TRANSFER else account,
        )
        if LedgerEntry.objects.filter(**duplicate).exists():
            raise IdempotencyError(
                f"Ledger entry already exists for {source_type}:{source_id}"
            ) from exc
        logger.exception(
            "Ledger insert rejected",
            extra={"source_type": source_type, "source_id": str(source_id), "account_id": account.id},
        )
        raise StorageFailureError(f"Failed to insert ledger entry: {exc}") from exc
    except DatabaseError as exc:
        logger.exception(
            "Ledger storage failure",
            extra={"action": "insert ledger entry", "source_type": source_type, "source_id": str(source_id)},
        )
        raise StorageFailureError(f"Failed to insert ledger entry: {exc}") from exc

    logger.info(
        "Ledger entry posted",
        extra={
            "entry_id": entry.id,
            "account_id": account.id,
            "direction": direction,
            "amount": amount,
            "source_type": source_type,
            "source_id": str(source_id),
        },
    )
    return entry


def update_source_entries(
    *,
    source_type: str,
    source_id,
    account: Account,
    amount,
    occurred_on: date,
    merchant: str | None = None,
    note: str | None = None,
) -> int:
    """Rewrite the mutable fields of the source's entries on `account`. Returns rows updated."""
    amount = _positive_amount(amount)
    if occurred_on is None:
        raise InvalidStateError("Ledger entry requires occurred_on")

    filters = _source_filter(source_type=source_type, source_id=source_id, account=account)
    with _storage_errors("update ledger entries", source_type=source_type, source_id=str(source_id)):
        updated = LedgerEntry.objects.filter(**filters).update(
            amount=amount,
            occurred_on=occurred_on,
            merchant=merchant,
            note=note,
        )

    logger.info(
        "Ledger entries updated",
        extra={"source_type": source_type, "source_id": str(source_id), "rows": updated},
    )
    return updated


def delete_source_entries(*, source_type: str, source_id, user=None, account=None) -> int:
    """
    Remove the source's entries (all of them, or only those on `account`).

    Raises StorageFailureError on failure so callers can abort before
    touching the source record itself.
    """
    filters = _source_filter(source_type=source_type, source_id=source_id, user=user, account=account)
    with _storage_errors("delete ledger entries", source_type=source_type, source_id=str(source_id)):
        deleted, _ = LedgerEntry.objects.filter(**filters).delete()

    if deleted:
        logger.info(
            "Ledger entries deleted",
            extra={"source_type": source_type, "source_id": str(source_id), "rows": deleted},
        )
    return deleted
