# ledger/services/account_registry.py

"""
======================================================
PATH: ledger/services/account_registry.py
======================================================
ACCOUNT REGISTRY

Resolves a user's card/cash accounts.

Rules:
- Every user has exactly one card and one cash account
- Accounts are created lazily on first access, with opening_balance = 0
- Concurrent first access must not create duplicates: the database
  uniqueness constraint decides, and the loser re-reads (get_or_create)
- Unresolvable payment methods are fatal for the calling mutation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import DatabaseError, IntegrityError

from ledger.models import Account
from ledger.services.exceptions import (
    AccountResolutionError,
    NotFoundError,
    StorageFailureError,
)

logger = logging.getLogger(__name__)

ACCOUNT_TYPES = (Account.CARD, Account.CASH)


@dataclass(frozen=True)
class AccountIds:
    card_id: int
    cash_id: int

    def for_type(self, account_type: str) -> int:
        return self.card_id if account_type == Account.CARD else self.cash_id


def normalize_account_type(value) -> str:
    account_type = (str(value or "")).strip().lower()
    if account_type not in ACCOUNT_TYPES:
        raise AccountResolutionError(f"Unknown account type: {value!r}")
    return account_type


def get_account_id(*, user, account_type: str) -> int | None:
    """Lookup only; returns None when the account was never created."""
    account_type = normalize_account_type(account_type)
    try:
        return (
            Account.objects.filter(user=user, account_type=account_type)
            .values_list("id", flat=True)
            .first()
        )
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to read {account_type} account: {exc}") from exc


def get_account(*, user, account_type: str) -> Account:
    account_type = normalize_account_type(account_type)
    try:
        return Account.objects.get(user=user, account_type=account_type)
    except Account.DoesNotExist as exc:
        raise NotFoundError(f"No {account_type} account for user") from exc
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to read {account_type} account: {exc}") from exc


def _get_or_create_account(*, user, account_type: str) -> Account:
    try:
        account, created = Account.objects.get_or_create(
            user=user,
            account_type=account_type,
            defaults={
                "name": Account.DEFAULT_NAMES[account_type],
                "opening_balance": 0,
            },
        )
    except IntegrityError as exc:
        # get_or_create already re-read after the conflict; reaching here
        # means the row is still not visible.
        logger.exception(
            "Account creation conflict could not be resolved",
            extra={"user_id": str(user.pk), "account_type": account_type},
        )
        raise StorageFailureError(f"Failed to create {account_type} account: {exc}") from exc
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to create {account_type} account: {exc}") from exc

    if created:
        logger.info(
            "Account created",
            extra={"user_id": str(user.pk), "account_type": account_type, "account_id": account.id},
        )
    return account


def ensure_accounts(*, user) -> AccountIds:
    """Guarantee the user's card and cash accounts exist; safe to call repeatedly."""
    try:
        existing = dict(
            Account.objects.filter(user=user).values_list("account_type", "id")
        )
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to read accounts: {exc}") from exc

    for account_type in ACCOUNT_TYPES:
        if account_type not in existing:
            existing[account_type] = _get_or_create_account(user=user, account_type=account_type).id

    return AccountIds(card_id=existing[Account.CARD], cash_id=existing[Account.CASH])


def resolve_payment_account(*, user, payment_method) -> Account:
    """
    Account that a payment method draws from / pays into.

    Creates the account if needed; never returns None.
    """
    account_type = normalize_account_type(payment_method)
    return _get_or_create_account(user=user, account_type=account_type)
