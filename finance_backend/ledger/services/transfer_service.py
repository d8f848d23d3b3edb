# PATH: ledger/services/transfer_service.py

"""
TRANSFER SERVICE

A transfer moves money between the user's own accounts and owns exactly
two ledger entries sharing source_id = transfer.id:
- `out` on from_account
- `in`  on to_account

Create: record + both entries in one transaction. If either entry insert
fails the transfer row is rolled back with it.

Delete: entries first, then the record. If the entries cannot be removed
the record stays, so the ledger never keeps legs without a transfer.
"""

from __future__ import annotations

import logging
from datetime import date

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from ledger.models import Account, LedgerEntry, Transfer
from ledger.services import journal
from ledger.services.exceptions import (
    InvalidStateError,
    LedgerServiceError,
    NotFoundError,
    StorageFailureError,
)

logger = logging.getLogger(__name__)

DEFAULT_TRANSFER_NOTE = "Transfer"


def _owned_account(*, user, account_id) -> Account:
    try:
        return Account.objects.get(id=account_id, user=user)
    except (Account.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Account not found") from exc
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to read account: {exc}") from exc


def on_transfer_created(transfer: Transfer) -> list[LedgerEntry]:
    """Post both legs. Merchant stays empty; note defaults to "Transfer"."""
    note = transfer.note or DEFAULT_TRANSFER_NOTE
    legs = [
        (transfer.from_account, LedgerEntry.OUT),
        (transfer.to_account, LedgerEntry.IN),
    ]
    return [
        journal.post_entry(
            account=account,
            direction=direction,
            amount=transfer.amount,
            occurred_on=transfer.transfer_date,
            source_type=LedgerEntry.SOURCE_TRANSFER,
            source_id=transfer.id,
            merchant=None,
            note=note,
        )
        for account, direction in legs
    ]


@transaction.atomic
def create_transfer(
    *,
    user,
    from_account_id,
    to_account_id,
    amount: int,
    transfer_date: date,
    note: str | None = None,
) -> Transfer:
    if str(from_account_id) == str(to_account_id):
        raise InvalidStateError("from_account and to_account must differ")

    from_account = _owned_account(user=user, account_id=from_account_id)
    to_account = _owned_account(user=user, account_id=to_account_id)

    transfer = Transfer(
        user=user,
        from_account=from_account,
        to_account=to_account,
        amount=amount,
        transfer_date=transfer_date,
        note=(note or "").strip() or None,
    )
    try:
        transfer.full_clean()
        transfer.save()
    except ValidationError as exc:
        raise InvalidStateError("; ".join(exc.messages)) from exc
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to create transfer: {exc}") from exc

    try:
        on_transfer_created(transfer)
    except LedgerServiceError:
        logger.error(
            "Transfer entries failed; transfer rolled back",
            extra={"transfer_id": str(transfer.id)},
        )
        transaction.set_rollback(True)
        raise

    logger.info(
        "Transfer created",
        extra={
            "transfer_id": str(transfer.id),
            "from_account_id": from_account.id,
            "to_account_id": to_account.id,
            "amount": transfer.amount,
        },
    )
    return transfer


def on_transfer_deleted(*, user, transfer_id) -> int:
    return journal.delete_source_entries(
        source_type=LedgerEntry.SOURCE_TRANSFER,
        source_id=transfer_id,
        user=user,
    )


@transaction.atomic
def delete_transfer(*, user, transfer_id) -> None:
    try:
        transfer = Transfer.objects.select_for_update().get(id=transfer_id, user=user)
    except (Transfer.DoesNotExist, ValidationError) as exc:
        raise NotFoundError("Transfer not found") from exc
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to read transfer: {exc}") from exc

    on_transfer_deleted(user=user, transfer_id=transfer.id)

    try:
        transfer.delete()
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to delete transfer: {exc}") from exc

    logger.info("Transfer deleted", extra={"transfer_id": str(transfer_id)})


def list_transfers(
    *,
    user,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int | None = None,
):
    qs = Transfer.objects.filter(user=user).select_related("from_account", "to_account")
    if date_from:
        qs = qs.filter(transfer_date__gte=date_from)
    if date_to:
        qs = qs.filter(transfer_date__lte=date_to)
    qs = qs.order_by("-transfer_date", "-created_at")
    if limit:
        qs = qs[:limit]
    return qs
