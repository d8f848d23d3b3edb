# PATH: ledger/services/reconciliation_service.py

"""
LEDGER RECONCILIATION (READ-ONLY)

Checks, per user:
1) counted expenses   -> exactly one `out` entry each
2) excluded expenses  -> no entry at all
3) received salaries  -> exactly one `in` entry each
4) transfers          -> exactly one `in` + one `out` each
5) orphans            -> entries whose source record no longer exists
                         (or, for salary, is no longer received)

Findings are data, not exceptions. Each check runs in its own savepoint;
a failing check is logged and reported without stopping the others.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field

from django.db import DatabaseError, transaction

from ledger.models import Expense, LedgerEntry, SalaryPayment, Transfer

logger = logging.getLogger(__name__)

MAX_REPORTED_IDS = 50


@dataclass
class SourceCheck:
    checked: int = 0
    mismatched_ids: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.mismatched_ids

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "checked": self.checked,
            "mismatched": len(self.mismatched_ids),
            "ids": self.mismatched_ids[:MAX_REPORTED_IDS],
            "error": self.error,
        }


@dataclass
class OrphanCheck:
    entry_ids: list[int] = field(default_factory=list)
    by_source_type: dict[str, int] = field(default_factory=dict)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.entry_ids

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "count": len(self.entry_ids),
            "by_source_type": self.by_source_type,
            "ids": self.entry_ids[:MAX_REPORTED_IDS],
            "error": self.error,
        }


@dataclass
class ReconciliationReport:
    user_id: str
    expenses: SourceCheck = field(default_factory=SourceCheck)
    excluded_expenses: SourceCheck = field(default_factory=SourceCheck)
    salary_payments: SourceCheck = field(default_factory=SourceCheck)
    transfers: SourceCheck = field(default_factory=SourceCheck)
    orphans: OrphanCheck = field(default_factory=OrphanCheck)

    @property
    def ok(self) -> bool:
        return all(
            check.ok
            for check in (
                self.expenses,
                self.excluded_expenses,
                self.salary_payments,
                self.transfers,
                self.orphans,
            )
        )

    @property
    def issue_count(self) -> int:
        return (
            len(self.expenses.mismatched_ids)
            + len(self.excluded_expenses.mismatched_ids)
            + len(self.salary_payments.mismatched_ids)
            + len(self.transfers.mismatched_ids)
            + len(self.orphans.entry_ids)
        )

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "user_id": self.user_id,
            "expenses": self.expenses.to_dict(),
            "excluded_expenses": self.excluded_expenses.to_dict(),
            "salary_payments": self.salary_payments.to_dict(),
            "transfers": self.transfers.to_dict(),
            "orphans": self.orphans.to_dict(),
        }


def _leg_counts(*, user, source_type: str) -> dict[str, Counter]:
    """{source_id: Counter({direction: n})} for one source type."""
    rows = (
        LedgerEntry.objects.filter(user=user, source_type=source_type)
        .values_list("source_id", "direction")
    )
    counts: dict[str, Counter] = defaultdict(Counter)
    for source_id, direction in rows:
        counts[str(source_id)][direction] += 1
    return counts


def _check_expenses(user, report: ReconciliationReport) -> None:
    legs = _leg_counts(user=user, source_type=LedgerEntry.SOURCE_EXPENSE)
    rows = Expense.objects.filter(user=user).values_list("id", "excluded_from_budget")

    for expense_id, excluded in rows:
        key = str(expense_id)
        counts = legs.get(key, Counter())
        if excluded:
            report.excluded_expenses.checked += 1
            if sum(counts.values()):
                report.excluded_expenses.mismatched_ids.append(key)
        else:
            report.expenses.checked += 1
            if counts[LedgerEntry.OUT] != 1 or counts[LedgerEntry.IN]:
                report.expenses.mismatched_ids.append(key)


def _check_salary(user, report: ReconciliationReport) -> None:
    legs = _leg_counts(user=user, source_type=LedgerEntry.SOURCE_SALARY_PAYMENT)
    received = SalaryPayment.objects.filter(user=user, received=True).values_list("id", flat=True)

    for payment_id in received:
        key = str(payment_id)
        counts = legs.get(key, Counter())
        report.salary_payments.checked += 1
        if counts[LedgerEntry.IN] != 1 or counts[LedgerEntry.OUT]:
            report.salary_payments.mismatched_ids.append(key)


def _check_transfers(user, report: ReconciliationReport) -> None:
    legs = _leg_counts(user=user, source_type=LedgerEntry.SOURCE_TRANSFER)

    for transfer_id in Transfer.objects.filter(user=user).values_list("id", flat=True):
        key = str(transfer_id)
        counts = legs.get(key, Counter())
        report.transfers.checked += 1
        if counts[LedgerEntry.IN] != 1 or counts[LedgerEntry.OUT] != 1:
            report.transfers.mismatched_ids.append(key)


def _check_orphans(user, report: ReconciliationReport) -> None:
    expense_ids = {str(i) for i in Expense.objects.filter(user=user).values_list("id", flat=True)}
    live = {
        LedgerEntry.SOURCE_EXPENSE: expense_ids,
        LedgerEntry.SOURCE_CASH_WITHDRAWAL: expense_ids,
        LedgerEntry.SOURCE_TRANSFER: {
            str(i) for i in Transfer.objects.filter(user=user).values_list("id", flat=True)
        },
        LedgerEntry.SOURCE_SALARY_PAYMENT: {
            str(i)
            for i in SalaryPayment.objects.filter(user=user, received=True).values_list("id", flat=True)
        },
    }

    by_type: Counter = Counter()
    rows = LedgerEntry.objects.filter(user=user).order_by("id").values_list("id", "source_type", "source_id")
    for entry_id, source_type, source_id in rows:
        if str(source_id) not in live.get(source_type, set()):
            report.orphans.entry_ids.append(entry_id)
            by_type[source_type] += 1

    report.orphans.by_source_type = dict(by_type)


_CHECKS = (
    ("expenses", _check_expenses, ("expenses", "excluded_expenses")),
    ("salary_payments", _check_salary, ("salary_payments",)),
    ("transfers", _check_transfers, ("transfers",)),
    ("orphans", _check_orphans, ("orphans",)),
)


def reconcile(*, user) -> ReconciliationReport:
    report = ReconciliationReport(user_id=str(user.pk))

    for name, check, sections in _CHECKS:
        try:
            with transaction.atomic():
                check(user, report)
        except DatabaseError as exc:
            logger.exception("Reconciliation check failed", extra={"check": name, "user_id": str(user.pk)})
            for section in sections:
                getattr(report, section).error = str(exc)

    if not report.ok:
        logger.warning(
            "Ledger drift detected",
            extra={"user_id": str(user.pk), "issues": report.issue_count},
        )
    return report
