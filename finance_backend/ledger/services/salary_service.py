# PATH: ledger/services/salary_service.py

"""
SALARY PAYMENT SERVICE

A received salary payment owns exactly one `in` entry on the card
account (source_type=salary_payment, note "Salary").

Posting is idempotent:
- existence check first (clear no-op for retries)
- insert guarded by the (source_type, source_id, account) constraint;
  a conflict means another request already posted it

Received transitions on update (before.received, after.received):
- False -> True : post income
- True  -> False: remove the entry
- True  -> True : amount/date change rewrites the entry in place
- False -> False: nothing
"""

from __future__ import annotations

import logging
from datetime import date

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from ledger.models import Account, LedgerEntry, SalaryPayment
from ledger.services import journal
from ledger.services.account_registry import resolve_payment_account
from ledger.services.exceptions import (
    IdempotencyError,
    InvalidStateError,
    NotFoundError,
    StorageFailureError,
)

logger = logging.getLogger(__name__)

SALARY_NOTE = "Salary"

UPDATABLE_FIELDS = ("period", "pay_date", "amount", "received")


def _existing_entry(payment: SalaryPayment) -> LedgerEntry | None:
    entries = journal.find_source_entries(
        source_type=LedgerEntry.SOURCE_SALARY_PAYMENT,
        source_id=payment.id,
        user=payment.user,
    )
    return entries[0] if entries else None


def on_salary_payment_received(payment: SalaryPayment) -> LedgerEntry:
    """Post the income entry once; repeat calls return the existing entry."""
    if not payment.received:
        raise InvalidStateError("Salary payment is not marked received")

    existing = _existing_entry(payment)
    if existing is not None:
        logger.info(
            "Salary already posted",
            extra={"payment_id": str(payment.id), "entry_id": existing.id},
        )
        return existing

    card = resolve_payment_account(user=payment.user, payment_method=Account.CARD)
    try:
        return journal.post_entry(
            account=card,
            direction=LedgerEntry.IN,
            amount=payment.amount,
            occurred_on=payment.pay_date,
            source_type=LedgerEntry.SOURCE_SALARY_PAYMENT,
            source_id=payment.id,
            merchant=None,
            note=SALARY_NOTE,
        )
    except IdempotencyError:
        logger.warning(
            "Salary posted concurrently; using existing entry",
            extra={"payment_id": str(payment.id)},
        )
        existing = _existing_entry(payment)
        if existing is None:
            raise
        return existing


def on_salary_payment_unreceived(*, user, payment_id) -> int:
    return journal.delete_source_entries(
        source_type=LedgerEntry.SOURCE_SALARY_PAYMENT,
        source_id=payment_id,
        user=user,
    )


def _sync_received_entry(payment: SalaryPayment) -> None:
    card = resolve_payment_account(user=payment.user, payment_method=Account.CARD)
    updated = journal.update_source_entries(
        source_type=LedgerEntry.SOURCE_SALARY_PAYMENT,
        source_id=payment.id,
        account=card,
        amount=payment.amount,
        occurred_on=payment.pay_date,
        merchant=None,
        note=SALARY_NOTE,
    )
    if updated == 0:
        on_salary_payment_received(payment)


def _validated_save(payment: SalaryPayment) -> None:
    try:
        payment.full_clean()
        payment.save()
    except ValidationError as exc:
        raise InvalidStateError("; ".join(exc.messages)) from exc
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to save salary payment: {exc}") from exc


def _get_owned_payment(*, user, payment_id, for_update: bool = False) -> SalaryPayment:
    qs = SalaryPayment.objects.filter(user=user)
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(id=payment_id)
    except (SalaryPayment.DoesNotExist, ValidationError) as exc:
        raise NotFoundError("Salary payment not found") from exc
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to read salary payment: {exc}") from exc


@transaction.atomic
def create_payment(*, user, period: str, pay_date: date, amount: int, received: bool = False) -> SalaryPayment:
    payment = SalaryPayment(
        user=user,
        period=(period or "").strip(),
        pay_date=pay_date,
        amount=amount,
        received=bool(received),
    )
    _validated_save(payment)

    if payment.received:
        on_salary_payment_received(payment)

    logger.info(
        "Salary payment created",
        extra={"payment_id": str(payment.id), "received": payment.received},
    )
    return payment


@transaction.atomic
def update_payment(*, user, payment_id, **changes) -> SalaryPayment:
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise InvalidStateError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    payment = _get_owned_payment(user=user, payment_id=payment_id, for_update=True)
    was_received = payment.received
    before = (payment.amount, payment.pay_date)

    for name, value in changes.items():
        setattr(payment, name, value)
    payment.received = bool(payment.received)
    _validated_save(payment)

    if not was_received and payment.received:
        on_salary_payment_received(payment)
    elif was_received and not payment.received:
        on_salary_payment_unreceived(user=user, payment_id=payment.id)
    elif payment.received and before != (payment.amount, payment.pay_date):
        _sync_received_entry(payment)

    return payment


@transaction.atomic
def mark_payment_received(*, user, payment_id) -> LedgerEntry:
    payment = _get_owned_payment(user=user, payment_id=payment_id, for_update=True)
    if not payment.received:
        payment.received = True
        _validated_save(payment)
    return on_salary_payment_received(payment)


@transaction.atomic
def delete_payment(*, user, payment_id) -> None:
    payment = _get_owned_payment(user=user, payment_id=payment_id, for_update=True)
    on_salary_payment_unreceived(user=user, payment_id=payment.id)

    try:
        payment.delete()
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to delete salary payment: {exc}") from exc

    logger.info("Salary payment deleted", extra={"payment_id": str(payment_id)})


def list_payments(*, user, year: int | None = None, month: int | None = None):
    qs = SalaryPayment.objects.filter(user=user)
    if year:
        qs = qs.filter(pay_date__year=year)
    if month:
        qs = qs.filter(pay_date__month=month)
    return qs.order_by("-pay_date", "-created_at")
