# PATH: ledger/services/opening_balance_service.py

"""
OPENING BALANCE CORRECTION

Lets a user say "my card balance is actually X" without touching the
journal:

    opening_balance := X - (Σin - Σout since cutover)

so that the computed balance equals X right after the correction.

Security:
- Privileged; the user's password is re-checked on every call
- A failed check changes nothing
"""

from __future__ import annotations

import logging

from django.db import DatabaseError, transaction

from ledger.models import Account
from ledger.services.account_registry import normalize_account_type, resolve_payment_account
from ledger.services.balance_service import ledger_delta_since_cutover
from ledger.services.exceptions import (
    InvalidStateError,
    ReauthenticationError,
    StorageFailureError,
)

logger = logging.getLogger(__name__)


def _require_password(user, password: str | None) -> None:
    if not password or not user.check_password(password):
        logger.warning("Balance correction rejected: bad password", extra={"user_id": str(user.pk)})
        raise ReauthenticationError("Password is incorrect")


def _whole_amount(value) -> int:
    if isinstance(value, bool):
        raise InvalidStateError(f"Invalid balance value: {value!r}")
    try:
        amount = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidStateError(f"Invalid balance value: {value!r}") from exc
    if not isinstance(value, str) and amount != value:
        raise InvalidStateError(f"Balance must be a whole number of minor units: {value!r}")
    return amount


def _reanchor(*, user, account_type: str, new_current_value) -> Account:
    account_type = normalize_account_type(account_type)
    target = _whole_amount(new_current_value)

    resolve_payment_account(user=user, payment_method=account_type)
    try:
        account = Account.objects.select_for_update().get(user=user, account_type=account_type)
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to read {account_type} account: {exc}") from exc

    delta = ledger_delta_since_cutover(account)
    previous = account.opening_balance
    account.opening_balance = target - delta

    try:
        account.save(update_fields=["opening_balance", "updated_at"])
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to update opening balance: {exc}") from exc

    logger.info(
        "Opening balance corrected",
        extra={
            "account_id": account.id,
            "account_type": account_type,
            "previous_opening_balance": previous,
            "opening_balance": account.opening_balance,
            "ledger_delta": delta,
        },
    )
    return account


@transaction.atomic
def correct_opening_balance(*, user, account_type: str, new_current_value, password: str) -> Account:
    _require_password(user, password)
    return _reanchor(user=user, account_type=account_type, new_current_value=new_current_value)


@transaction.atomic
def correct_opening_balances(*, user, password: str, values: dict) -> list[Account]:
    """Correct several accounts under one password check and one transaction."""
    _require_password(user, password)
    if not values:
        raise InvalidStateError("No balances provided")
    return [
        _reanchor(user=user, account_type=account_type, new_current_value=value)
        for account_type, value in values.items()
    ]
