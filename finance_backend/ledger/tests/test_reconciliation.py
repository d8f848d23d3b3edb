# ledger/tests/test_reconciliation.py

from __future__ import annotations

import uuid
from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.db import DatabaseError
from django.test import TestCase

from ledger.models import Expense, LedgerEntry, SalaryPayment
from ledger.services import journal
from ledger.services.expense_service import create_expense, update_expense
from ledger.services.reconciliation_service import reconcile
from ledger.services.salary_service import create_payment
from ledger.services.transfer_service import create_transfer
from ledger.tests.helpers import AFTER_CUTOVER, accounts_for, make_user


class ReconciliationTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.card, self.cash = accounts_for(self.user, card_opening=100000)

        self.counted = create_expense(
            user=self.user, amount=1000, merchant="Korzinka", category_id="groceries", expense_date=AFTER_CUTOVER
        )
        self.excluded = create_expense(
            user=self.user,
            amount=2000,
            merchant="Friend",
            category_id="transfers",
            expense_date=AFTER_CUTOVER,
        )
        self.payment = create_payment(
            user=self.user, period="2026-03/1", pay_date=AFTER_CUTOVER, amount=40000, received=True
        )
        self.transfer = create_transfer(
            user=self.user,
            from_account_id=self.card.id,
            to_account_id=self.cash.id,
            amount=500,
            transfer_date=AFTER_CUTOVER,
        )

    def test_consistent_ledger_is_ok(self):
        # Exercise a few mutations first; the bijection must survive them.
        update_expense(user=self.user, expense_id=self.counted.id, amount=1500, payment_method="cash")
        update_expense(user=self.user, expense_id=self.excluded.id, excluded_from_budget=False)
        update_expense(user=self.user, expense_id=self.excluded.id, excluded_from_budget=True)

        report = reconcile(user=self.user)

        self.assertTrue(report.ok, report.to_dict())
        self.assertEqual(report.expenses.checked, 1)
        self.assertEqual(report.excluded_expenses.checked, 1)
        self.assertEqual(report.salary_payments.checked, 1)
        self.assertEqual(report.transfers.checked, 1)

    def test_missing_expense_entry_is_reported(self):
        LedgerEntry.objects.filter(source_id=self.counted.id).delete()

        report = reconcile(user=self.user)

        self.assertFalse(report.ok)
        self.assertEqual(report.expenses.mismatched_ids, [str(self.counted.id)])

    def test_stale_entry_on_excluded_expense_is_reported(self):
        Expense.objects.filter(id=self.counted.id).update(excluded_from_budget=True)

        report = reconcile(user=self.user)

        self.assertEqual(report.excluded_expenses.mismatched_ids, [str(self.counted.id)])

    def test_unposted_received_salary_is_reported(self):
        LedgerEntry.objects.filter(source_id=self.payment.id).delete()
        report = reconcile(user=self.user)
        self.assertEqual(report.salary_payments.mismatched_ids, [str(self.payment.id)])

    def test_transfer_missing_leg_is_reported(self):
        LedgerEntry.objects.filter(source_id=self.transfer.id, direction=LedgerEntry.IN).delete()
        report = reconcile(user=self.user)
        self.assertEqual(report.transfers.mismatched_ids, [str(self.transfer.id)])

    def test_orphans_are_reported(self):
        orphan = journal.post_entry(
            account=self.card,
            direction=LedgerEntry.OUT,
            amount=10,
            occurred_on=AFTER_CUTOVER,
            source_type=LedgerEntry.SOURCE_EXPENSE,
            source_id=uuid.uuid4(),
        )
        # Salary entry whose payment is no longer received.
        SalaryPayment.objects.filter(id=self.payment.id).update(received=False)

        report = reconcile(user=self.user)

        self.assertIn(orphan.id, report.orphans.entry_ids)
        self.assertEqual(report.orphans.by_source_type, {"expense": 1, "salary_payment": 1})
        self.assertEqual(report.to_dict()["orphans"]["count"], 2)

    def test_failed_check_does_not_stop_the_others(self):
        LedgerEntry.objects.filter(source_id=self.counted.id).delete()

        with patch.object(SalaryPayment.objects, "filter", side_effect=DatabaseError("boom")):
            report = reconcile(user=self.user)

        self.assertEqual(report.salary_payments.error, "boom")
        self.assertEqual(report.orphans.error, "boom")
        self.assertEqual(report.expenses.mismatched_ids, [str(self.counted.id)])
        self.assertTrue(report.transfers.ok)
        self.assertFalse(report.ok)

    def test_reports_are_per_user(self):
        other = make_user()
        accounts_for(other)
        LedgerEntry.objects.filter(source_id=self.counted.id).delete()

        self.assertTrue(reconcile(user=other).ok)


class ReconcileCommandTests(TestCase):
    def setUp(self):
        self.user = make_user("owner@example.com")
        accounts_for(self.user)
        self.expense = create_expense(
            user=self.user, amount=1000, merchant="Korzinka", category_id="groceries", expense_date=AFTER_CUTOVER
        )

    def test_clean_ledger_passes(self):
        out = StringIO()
        call_command("reconcile_ledger", "--strict", stdout=out, stderr=StringIO())
        self.assertIn("LEDGER RECONCILED", out.getvalue())

    def test_strict_exits_non_zero_on_drift(self):
        LedgerEntry.objects.filter(source_id=self.expense.id).delete()
        err = StringIO()

        with self.assertRaises(SystemExit) as ctx:
            call_command("reconcile_ledger", "--strict", "--user", "owner@example.com", stdout=StringIO(), stderr=err)

        self.assertEqual(ctx.exception.code, 1)
        self.assertIn(str(self.expense.id), err.getvalue())

    def test_drift_without_strict_only_reports(self):
        LedgerEntry.objects.filter(source_id=self.expense.id).delete()
        err = StringIO()
        call_command("reconcile_ledger", stdout=StringIO(), stderr=err)
        self.assertIn("LEDGER DRIFT FOUND", err.getvalue())
