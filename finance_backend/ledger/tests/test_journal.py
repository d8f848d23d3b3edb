# ledger/tests/test_journal.py

from __future__ import annotations

import uuid

from django.test import TestCase

from ledger.models import LedgerEntry
from ledger.services import journal
from ledger.services.exceptions import IdempotencyError, InvalidStateError
from ledger.tests.helpers import AFTER_CUTOVER, accounts_for, make_user


class JournalTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.card, self.cash = accounts_for(self.user)

    def _post(self, **overrides):
        payload = {
            "account": self.card,
            "direction": LedgerEntry.OUT,
            "amount": 1500,
            "occurred_on": AFTER_CUTOVER,
            "source_type": LedgerEntry.SOURCE_EXPENSE,
            "source_id": uuid.uuid4(),
        }
        payload.update(overrides)
        return journal.post_entry(**payload)

    def test_post_entry_denormalizes_user(self):
        entry = self._post(merchant="Korzinka", note="groceries")
        self.assertEqual(entry.user_id, self.user.id)
        self.assertEqual(entry.signed_amount, -1500)

    def test_amount_must_be_positive(self):
        for amount in (0, -5, "abc", 1.5, True):
            with self.subTest(amount=amount), self.assertRaises(InvalidStateError):
                self._post(amount=amount)
        self.assertEqual(LedgerEntry.objects.count(), 0)

    def test_direction_must_be_in_or_out(self):
        with self.assertRaises(InvalidStateError):
            self._post(direction="sideways")

    def test_entry_user_follows_account_owner(self):
        other_card, _ = accounts_for(make_user())
        entry = self._post(account=other_card)
        self.assertEqual(entry.user_id, other_card.user_id)

    def test_duplicate_source_on_same_account_raises_idempotency_error(self):
        source_id = uuid.uuid4()
        self._post(source_id=source_id)

        with self.assertRaises(IdempotencyError):
            self._post(source_id=source_id)

        # The savepoint keeps the outer transaction usable.
        self.assertEqual(LedgerEntry.objects.filter(source_id=source_id).count(), 1)

    def test_transfer_legs_unique_per_direction(self):
        source_id = uuid.uuid4()
        common = {"source_type": LedgerEntry.SOURCE_TRANSFER, "source_id": source_id}
        self._post(account=self.card, direction=LedgerEntry.OUT, **common)
        self._post(account=self.cash, direction=LedgerEntry.IN, **common)

        with self.assertRaises(IdempotencyError):
            self._post(account=self.cash, direction=LedgerEntry.OUT, **common)

    def test_update_and_delete_by_source(self):
        source_id = uuid.uuid4()
        entry = self._post(source_id=source_id)

        updated = journal.update_source_entries(
            source_type=LedgerEntry.SOURCE_EXPENSE,
            source_id=source_id,
            account=self.card,
            amount=2500,
            occurred_on=AFTER_CUTOVER,
            merchant="Makro",
            note=None,
        )
        self.assertEqual(updated, 1)
        entry.refresh_from_db()
        self.assertEqual((entry.amount, entry.merchant), (2500, "Makro"))

        deleted = journal.delete_source_entries(
            source_type=LedgerEntry.SOURCE_EXPENSE,
            source_id=source_id,
            user=self.user,
        )
        self.assertEqual(deleted, 1)
        self.assertFalse(LedgerEntry.objects.filter(source_id=source_id).exists())
