# ledger/tests/test_balance.py

from __future__ import annotations

import uuid
from datetime import date

from django.test import TestCase, override_settings

from ledger.models import LedgerEntry
from ledger.services import journal
from ledger.services.balance_service import (
    compute_balance,
    compute_balances,
    get_account_balance,
    ledger_delta_since_cutover,
    total_balance,
)
from ledger.tests.helpers import AFTER_CUTOVER, BEFORE_CUTOVER, accounts_for, make_user


def _post(account, direction, amount, occurred_on, source_type=LedgerEntry.SOURCE_EXPENSE):
    return journal.post_entry(
        account=account,
        direction=direction,
        amount=amount,
        occurred_on=occurred_on,
        source_type=source_type,
        source_id=uuid.uuid4(),
    )


class ComputeBalanceTests(TestCase):
    def test_formula_ignores_movements_before_cutover(self):
        movements = [
            ("in", 1000, date(2026, 1, 1)),
            ("out", 999999, date(2026, 2, 19)),
            ("in", 2500, date(2026, 2, 20)),
            ("out", 700, date(2026, 3, 5)),
        ]
        self.assertEqual(
            compute_balance(opening_balance=10000, movements=movements, cutover_date=date(2026, 2, 20)),
            10000 + 2500 - 700,
        )

    def test_formula_uses_configured_cutover(self):
        movements = [("out", 400, date(2026, 2, 20))]
        self.assertEqual(compute_balance(opening_balance=0, movements=movements), -400)

    def test_opening_balance_may_be_negative(self):
        self.assertEqual(compute_balance(opening_balance=-50, movements=[]), -50)


class BalanceCalculatorTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.card, self.cash = accounts_for(self.user, card_opening=100000, cash_opening=3000)

    def test_balance_identity(self):
        _post(self.card, LedgerEntry.IN, 50000, AFTER_CUTOVER, LedgerEntry.SOURCE_SALARY_PAYMENT)
        _post(self.card, LedgerEntry.OUT, 12000, AFTER_CUTOVER)
        _post(self.cash, LedgerEntry.OUT, 1000, AFTER_CUTOVER)

        by_type = {b.account_type: b for b in compute_balances(user=self.user)}

        self.assertEqual(by_type["card"].computed_balance, 100000 + 50000 - 12000)
        self.assertEqual(by_type["cash"].computed_balance, 3000 - 1000)
        self.assertEqual(total_balance(by_type.values()), 138000 + 2000)

    def test_entries_before_cutover_never_change_balance(self):
        _post(self.card, LedgerEntry.OUT, 77777, BEFORE_CUTOVER)
        _post(self.card, LedgerEntry.IN, 11111, BEFORE_CUTOVER, LedgerEntry.SOURCE_SALARY_PAYMENT)

        self.assertEqual(get_account_balance(self.card), 100000)
        self.assertEqual(ledger_delta_since_cutover(self.card), 0)

    def test_entry_on_cutover_day_counts(self):
        _post(self.card, LedgerEntry.OUT, 500, date(2026, 2, 20))
        self.assertEqual(get_account_balance(self.card), 99500)

    @override_settings(LEDGER_CUTOVER_DATE=date(2026, 3, 1))
    def test_cutover_is_configurable(self):
        _post(self.card, LedgerEntry.OUT, 500, AFTER_CUTOVER)
        self.assertEqual(get_account_balance(self.card), 100000)

    def test_single_and_bulk_reads_agree(self):
        _post(self.card, LedgerEntry.OUT, 1234, AFTER_CUTOVER)
        _post(self.cash, LedgerEntry.IN, 4321, AFTER_CUTOVER, LedgerEntry.SOURCE_SALARY_PAYMENT)

        for balance in compute_balances(user=self.user):
            account = self.card if balance.account_type == "card" else self.cash
            self.assertEqual(balance.computed_balance, get_account_balance(account))

    def test_other_users_entries_do_not_leak(self):
        other = make_user()
        other_card, _ = accounts_for(other)
        _post(other_card, LedgerEntry.OUT, 9000, AFTER_CUTOVER)

        self.assertEqual(get_account_balance(self.card), 100000)
        self.assertEqual(get_account_balance(other_card), -9000)
