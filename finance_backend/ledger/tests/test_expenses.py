# ledger/tests/test_expenses.py

from __future__ import annotations

import uuid
from datetime import date
from unittest.mock import patch

from django.test import TestCase

from ledger.models import Expense, LedgerEntry
from ledger.services import journal
from ledger.services.exceptions import (
    InvalidStateError,
    NotFoundError,
    StorageFailureError,
)
from ledger.services.expense_ledger import (
    MOVED,
    NOOP,
    POSTED,
    REMOVED,
    UPDATED,
    ExpenseSnapshot,
    on_expense_updated,
)
from ledger.services.expense_service import (
    bulk_delete_expenses,
    create_expense,
    delete_expense,
    update_expense,
)
from ledger.services.reconciliation_service import reconcile
from ledger.services.transfer_service import delete_transfer
from ledger.services.withdrawal_service import convert_expense_to_withdrawal
from ledger.tests.helpers import AFTER_CUTOVER, accounts_for, balances, make_user


def _entries(expense):
    return LedgerEntry.objects.filter(source_type=LedgerEntry.SOURCE_EXPENSE, source_id=expense.id)


class ExpenseCreateTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.card, self.cash = accounts_for(self.user, card_opening=100000)

    def _create(self, **overrides):
        payload = {
            "user": self.user,
            "amount": 5000,
            "merchant": "Korzinka",
            "category_id": "groceries",
            "expense_date": AFTER_CUTOVER,
        }
        payload.update(overrides)
        return create_expense(**payload)

    def test_counted_expense_posts_one_out_entry(self):
        expense = self._create(note="weekly shop")

        entry = _entries(expense).get()
        self.assertEqual(entry.account_id, self.card.id)
        self.assertEqual(entry.direction, LedgerEntry.OUT)
        self.assertEqual((entry.amount, entry.occurred_on), (5000, AFTER_CUTOVER))
        self.assertEqual((entry.merchant, entry.note), ("Korzinka", "weekly shop"))
        self.assertEqual(balances(self.user)["card"], 95000)

    def test_cash_expense_hits_cash_account(self):
        expense = self._create(payment_method="cash")
        self.assertEqual(_entries(expense).get().account_id, self.cash.id)

    def test_excluded_expense_has_no_entry(self):
        expense = self._create(excluded_from_budget=True)
        self.assertFalse(_entries(expense).exists())
        self.assertEqual(balances(self.user)["card"], 100000)

    def test_transfer_category_is_excluded_by_default(self):
        expense = self._create(category_id="transfers")
        self.assertTrue(expense.excluded_from_budget)
        self.assertFalse(_entries(expense).exists())

    def test_accounts_are_created_lazily(self):
        fresh = make_user()
        expense = create_expense(user=fresh, amount=100, merchant="Bolt", category_id="taxi")
        self.assertEqual(_entries(expense).get().account.account_type, "card")

    def test_invalid_payment_method_creates_nothing(self):
        with self.assertRaises(InvalidStateError):
            self._create(payment_method="crypto")
        self.assertFalse(Expense.objects.filter(user=self.user).exists())
        self.assertEqual(LedgerEntry.objects.count(), 0)

    def test_failed_entry_rolls_back_expense(self):
        with patch(
            "ledger.services.journal.post_entry",
            side_effect=StorageFailureError("ledger down"),
        ):
            with self.assertRaises(StorageFailureError):
                self._create()
        self.assertFalse(Expense.objects.filter(user=self.user).exists())

    def test_entry_before_cutover_does_not_change_balance(self):
        self._create(expense_date=date(2026, 2, 1))
        self.assertEqual(balances(self.user)["card"], 100000)


class ExclusionTransitionTests(TestCase):
    """Every cell of (before.excluded, after.excluded)."""

    def setUp(self):
        self.user = make_user()
        self.card, self.cash = accounts_for(self.user, card_opening=100000)

    def _expense(self, excluded: bool) -> Expense:
        return create_expense(
            user=self.user,
            amount=5000,
            merchant="Korzinka",
            category_id="groceries",
            expense_date=AFTER_CUTOVER,
            excluded_from_budget=excluded,
        )

    def test_counted_to_excluded_removes_entry(self):
        expense = self._expense(excluded=False)
        update_expense(user=self.user, expense_id=expense.id, excluded_from_budget=True)
        self.assertFalse(_entries(expense).exists())

    def test_excluded_to_counted_posts_entry_from_new_state(self):
        expense = self._expense(excluded=True)
        update_expense(
            user=self.user,
            expense_id=expense.id,
            excluded_from_budget=False,
            amount=6000,
            payment_method="cash",
        )
        entry = _entries(expense).get()
        self.assertEqual((entry.account_id, entry.amount), (self.cash.id, 6000))

    def test_excluded_to_excluded_touches_nothing(self):
        expense = self._expense(excluded=True)
        update_expense(user=self.user, expense_id=expense.id, amount=9999)
        self.assertFalse(_entries(expense).exists())

    def test_counted_to_counted_updates_in_place(self):
        expense = self._expense(excluded=False)
        entry_id = _entries(expense).get().id

        update_expense(user=self.user, expense_id=expense.id, amount=7000, merchant="Makro")

        entry = _entries(expense).get()
        self.assertEqual(entry.id, entry_id)
        self.assertEqual((entry.amount, entry.merchant), (7000, "Makro"))

    def test_account_change_recreates_entry_on_new_account(self):
        expense = self._expense(excluded=False)
        update_expense(user=self.user, expense_id=expense.id, payment_method="cash")

        entry = _entries(expense).get()
        self.assertEqual(entry.account_id, self.cash.id)
        self.assertEqual(balances(self.user), {"card": 100000, "cash": -5000})

    def test_toggling_is_reversible_without_duplicates(self):
        expense = self._expense(excluded=True)
        for flag in (False, True, False, False, True, False):
            update_expense(user=self.user, expense_id=expense.id, excluded_from_budget=flag)
            self.assertEqual(_entries(expense).count(), 0 if flag else 1)

    def test_counting_again_rewrites_leftover_entry(self):
        expense = self._expense(excluded=True)
        journal.post_entry(
            account=self.card,
            direction=LedgerEntry.OUT,
            amount=4000,
            occurred_on=AFTER_CUTOVER,
            source_type=LedgerEntry.SOURCE_EXPENSE,
            source_id=expense.id,
        )

        update_expense(user=self.user, expense_id=expense.id, excluded_from_budget=False)

        expense.refresh_from_db()
        self.assertFalse(expense.excluded_from_budget)
        entry = _entries(expense).get()
        self.assertEqual((entry.account_id, entry.amount), (self.card.id, 5000))
        self.assertEqual(entry.merchant, "Korzinka")
        self.assertEqual(balances(self.user)["card"], 95000)
        self.assertTrue(reconcile(user=self.user).ok)

    def test_moving_into_transfer_category_excludes(self):
        expense = self._expense(excluded=False)
        update_expense(user=self.user, expense_id=expense.id, category_id="transfers")

        expense.refresh_from_db()
        self.assertTrue(expense.excluded_from_budget)
        self.assertFalse(_entries(expense).exists())

    def test_explicit_flag_wins_over_transfer_category(self):
        expense = self._expense(excluded=False)
        update_expense(
            user=self.user,
            expense_id=expense.id,
            category_id="transfers",
            excluded_from_budget=False,
        )

        expense.refresh_from_db()
        self.assertFalse(expense.excluded_from_budget)
        self.assertEqual(_entries(expense).count(), 1)

    def test_leaving_transfer_category_keeps_flag(self):
        expense = self._expense(excluded=True)
        update_expense(user=self.user, expense_id=expense.id, category_id="groceries")

        expense.refresh_from_db()
        self.assertTrue(expense.excluded_from_budget)
        self.assertFalse(_entries(expense).exists())

    def test_transition_outcomes(self):
        def snap(**kw):
            base = {
                "id": uuid.uuid4(),
                "user_id": self.user.id,
                "amount": 100,
                "expense_date": AFTER_CUTOVER,
                "merchant": "M",
                "note": None,
                "payment_method": "card",
                "excluded_from_budget": False,
            }
            base.update(kw)
            return ExpenseSnapshot(**base)

        expense_id = uuid.uuid4()
        counted = snap(id=expense_id)
        excluded = snap(id=expense_id, excluded_from_budget=True)

        self.assertEqual(on_expense_updated(user=self.user, before=excluded, after=excluded), NOOP)
        self.assertEqual(on_expense_updated(user=self.user, before=excluded, after=counted), POSTED)
        self.assertEqual(
            on_expense_updated(user=self.user, before=counted, after=snap(id=expense_id, amount=200)),
            UPDATED,
        )
        self.assertEqual(
            on_expense_updated(user=self.user, before=counted, after=snap(id=expense_id, payment_method="cash")),
            MOVED,
        )
        self.assertEqual(
            on_expense_updated(
                user=self.user,
                before=snap(id=expense_id, payment_method="cash"),
                after=snap(id=expense_id, payment_method="cash", excluded_from_budget=True),
            ),
            REMOVED,
        )

    def test_snapshots_of_different_expenses_are_rejected(self):
        a = ExpenseSnapshot.from_expense(self._expense(excluded=False))
        b = ExpenseSnapshot.from_expense(self._expense(excluded=False))
        with self.assertRaises(InvalidStateError):
            on_expense_updated(user=self.user, before=a, after=b)


class ExpenseScenarioTests(TestCase):
    def test_create_update_exclude_delete(self):
        user = make_user()
        accounts_for(user, card_opening=100000)

        expense = create_expense(
            user=user,
            amount=5000,
            merchant="Korzinka",
            category_id="groceries",
            expense_date=date(2026, 2, 21),
            payment_method="card",
            excluded_from_budget=False,
        )
        self.assertEqual(balances(user)["card"], 95000)

        update_expense(user=user, expense_id=expense.id, amount=7000)
        self.assertEqual(balances(user)["card"], 93000)

        update_expense(user=user, expense_id=expense.id, excluded_from_budget=True)
        self.assertEqual(balances(user)["card"], 100000)

        delete_expense(user=user, expense_id=expense.id)
        self.assertFalse(_entries(expense).exists())
        self.assertEqual(balances(user)["card"], 100000)

    def test_ledger_stays_reconciled_after_every_step(self):
        user = make_user()
        accounts_for(user, card_opening=100000, cash_opening=0)

        def assert_reconciled(step):
            report = reconcile(user=user)
            self.assertTrue(report.ok, f"{step}: {report.to_dict()}")

        groceries = create_expense(
            user=user,
            amount=5000,
            merchant="Korzinka",
            category_id="groceries",
            expense_date=AFTER_CUTOVER,
        )
        atm = create_expense(
            user=user,
            amount=20000,
            merchant="UZCASH ATM",
            category_id="cash",
            expense_date=AFTER_CUTOVER,
        )
        assert_reconciled("create")

        steps = [
            ("amount", {"amount": 7000}),
            ("method to cash", {"payment_method": "cash"}),
            ("exclude", {"excluded_from_budget": True}),
            ("amount while excluded", {"amount": 8000}),
            ("count again", {"excluded_from_budget": False}),
            ("method to card", {"payment_method": "card"}),
            ("into transfers", {"category_id": "transfers"}),
            ("count on cash", {"excluded_from_budget": False, "payment_method": "cash"}),
        ]
        for step, changes in steps:
            update_expense(user=user, expense_id=groceries.id, **changes)
            assert_reconciled(step)

        transfer = convert_expense_to_withdrawal(user=user, expense_id=atm.id)
        assert_reconciled("convert")
        self.assertEqual(balances(user), {"card": 80000, "cash": 20000 - 8000})

        delete_expense(user=user, expense_id=atm.id)
        assert_reconciled("delete converted expense")

        delete_expense(user=user, expense_id=groceries.id)
        assert_reconciled("delete expense")

        delete_transfer(user=user, transfer_id=transfer.id)
        assert_reconciled("delete transfer")
        self.assertFalse(LedgerEntry.objects.filter(user=user).exists())
        self.assertEqual(balances(user), {"card": 100000, "cash": 0})


class ExpenseDeleteTests(TestCase):
    def setUp(self):
        self.user = make_user()
        accounts_for(self.user, card_opening=100000)

    def _expense(self, merchant="Korzinka"):
        return create_expense(
            user=self.user,
            amount=1000,
            merchant=merchant,
            category_id="groceries",
            expense_date=AFTER_CUTOVER,
        )

    def test_delete_removes_entry_and_record(self):
        expense = self._expense()
        delete_expense(user=self.user, expense_id=expense.id)
        self.assertFalse(Expense.objects.filter(id=expense.id).exists())
        self.assertFalse(_entries(expense).exists())

    def test_delete_of_foreign_expense_is_not_found(self):
        expense = self._expense()
        with self.assertRaises(NotFoundError):
            delete_expense(user=make_user(), expense_id=expense.id)
        self.assertTrue(Expense.objects.filter(id=expense.id).exists())

    def test_entry_failure_keeps_expense(self):
        expense = self._expense()
        with patch(
            "ledger.services.journal.delete_source_entries",
            side_effect=StorageFailureError("ledger down"),
        ):
            with self.assertRaises(StorageFailureError):
                delete_expense(user=self.user, expense_id=expense.id)

        self.assertTrue(Expense.objects.filter(id=expense.id).exists())
        self.assertTrue(_entries(expense).exists())

    def test_bulk_delete_continues_past_failures(self):
        keep = self._expense("Broken")
        gone_a = self._expense("A")
        gone_b = self._expense("B")
        missing = uuid.uuid4()

        from ledger.services import expense_service

        real = expense_service.on_expense_deleted

        def flaky(*, user, expense_id):
            if expense_id == keep.id:
                raise StorageFailureError("ledger down")
            return real(user=user, expense_id=expense_id)

        with patch("ledger.services.expense_service.on_expense_deleted", side_effect=flaky):
            result = bulk_delete_expenses(
                user=self.user,
                expense_ids=[gone_a.id, keep.id, missing, gone_b.id],
            )

        self.assertEqual(sorted(result.deleted), sorted([str(gone_a.id), str(gone_b.id)]))
        self.assertEqual(result.not_found, [str(missing)])
        self.assertEqual(list(result.failed), [str(keep.id)])
        self.assertFalse(result.ok)

        self.assertTrue(Expense.objects.filter(id=keep.id).exists())
        self.assertEqual(_entries(keep).count(), 1)
        self.assertFalse(Expense.objects.filter(id__in=[gone_a.id, gone_b.id]).exists())

    def test_bulk_delete_limit(self):
        with self.settings(LEDGER_BULK_DELETE_MAX=2):
            with self.assertRaises(InvalidStateError):
                bulk_delete_expenses(user=self.user, expense_ids=[uuid.uuid4() for _ in range(3)])
