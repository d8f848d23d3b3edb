# ledger/services/balance_service.py

"""
======================================================
PATH: ledger/services/balance_service.py
======================================================
BALANCE CALCULATOR (READ-ONLY)

balance(account) = opening_balance
                 + Σ amount of `in`  entries with occurred_on >= cutover
                 - Σ amount of `out` entries with occurred_on >= cutover

Rules:
- Entries dated before the cutover are ignored (already folded into
  opening_balance)
- Single-account and all-accounts reads share one aggregation
  (_ledger_totals) so they can never disagree
- No side effects; callers that need accounts to exist call
  account_registry.ensure_accounts first
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Iterable

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError
from django.db.models import Sum

from ledger.models import Account, LedgerEntry
from ledger.services.exceptions import LedgerServiceError, StorageFailureError


class BalanceServiceError(LedgerServiceError):
    pass


def get_cutover_date() -> date:
    value = getattr(settings, "LEDGER_CUTOVER_DATE", None)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            raise ImproperlyConfigured(f"Invalid LEDGER_CUTOVER_DATE: {value!r}") from exc
    raise ImproperlyConfigured("LEDGER_CUTOVER_DATE is not configured")


def compute_balance(
    *,
    opening_balance: int,
    movements: Iterable[tuple[str, int, date]],
    cutover_date: date | None = None,
) -> int:
    """
    Pure balance formula over (direction, amount, occurred_on) tuples.
    """
    cutover = cutover_date or get_cutover_date()
    total = int(opening_balance or 0)

    for direction, amount, occurred_on in movements:
        if occurred_on < cutover:
            continue
        if direction == LedgerEntry.IN:
            total += int(amount)
        elif direction == LedgerEntry.OUT:
            total -= int(amount)
        else:
            raise BalanceServiceError(f"Invalid direction: {direction!r}")

    return total


@dataclass(frozen=True)
class AccountBalance:
    account_id: int
    account_type: str
    name: str
    opening_balance: int
    computed_balance: int

    def to_dict(self) -> dict:
        return asdict(self)


def _ledger_totals(account_ids: list[int], cutover: date) -> dict[int, int]:
    """Net movement (in - out) since cutover, keyed by account id."""
    if not account_ids:
        return {}

    try:
        rows = (
            LedgerEntry.objects.filter(account_id__in=account_ids, occurred_on__gte=cutover)
            .order_by()
            .values("account_id", "direction")
            .annotate(total=Sum("amount"))
        )
        totals = {account_id: 0 for account_id in account_ids}
        for row in rows:
            amount = int(row["total"] or 0)
            if row["direction"] == LedgerEntry.IN:
                totals[row["account_id"]] += amount
            else:
                totals[row["account_id"]] -= amount
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to aggregate ledger entries: {exc}") from exc

    return totals


def _balances_for(accounts: list[Account], cutover: date | None = None) -> list[AccountBalance]:
    cutover = cutover or get_cutover_date()
    totals = _ledger_totals([a.id for a in accounts], cutover)
    return [
        AccountBalance(
            account_id=a.id,
            account_type=a.account_type,
            name=a.name,
            opening_balance=a.opening_balance,
            computed_balance=a.opening_balance + totals.get(a.id, 0),
        )
        for a in accounts
    ]


def ledger_delta_since_cutover(account: Account) -> int:
    cutover = get_cutover_date()
    return _ledger_totals([account.id], cutover).get(account.id, 0)


def get_account_balance(account: Account) -> int:
    return _balances_for([account])[0].computed_balance


def compute_balances(*, user) -> list[AccountBalance]:
    try:
        accounts = list(Account.objects.filter(user=user).order_by("account_type"))
    except DatabaseError as exc:
        raise StorageFailureError(f"Failed to read accounts: {exc}") from exc
    return _balances_for(accounts)


def total_balance(balances: Iterable[AccountBalance]) -> int:
    return sum(b.computed_balance for b in balances)
