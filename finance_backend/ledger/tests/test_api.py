# ledger/tests/test_api.py

from __future__ import annotations

import uuid
from unittest.mock import patch

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from ledger.models import Expense, LedgerEntry, Transfer
from ledger.services.exceptions import StorageFailureError
from ledger.services.expense_service import create_expense
from ledger.tests.helpers import PASSWORD, accounts_for, make_user


class LedgerApiTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.card, self.cash = accounts_for(self.user, card_opening=100000)
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def _accounts(self):
        res = self.client.get(reverse("ledger-accounts"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        return {a["account_type"]: a["computed_balance"] for a in res.data["accounts"]}, res.data["total"]

    def _create_expense(self, **overrides):
        payload = {
            "amount": 5000,
            "merchant": "Korzinka",
            "category_id": "groceries",
            "expense_date": "2026-02-21",
            "payment_method": "card",
        }
        payload.update(overrides)
        return self.client.post(reverse("ledger-expenses"), payload, format="json")

    def test_requires_authentication(self):
        res = APIClient().get(reverse("ledger-accounts"))
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_accounts_are_created_on_first_read(self):
        fresh = make_user()
        client = APIClient()
        client.force_authenticate(user=fresh)

        res = client.get(reverse("ledger-accounts"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(a["account_type"] for a in res.data["accounts"]), ["card", "cash"])
        self.assertEqual(res.data["total"], 0)

    def test_expense_lifecycle_moves_balance(self):
        res = self._create_expense()
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        expense_id = res.data["id"]
        self.assertEqual(self._accounts(), ({"card": 95000, "cash": 0}, 95000))

        detail = reverse("ledger-expense-detail", args=[expense_id])
        res = self.client.patch(detail, {"amount": 7000}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(self._accounts()[0]["card"], 93000)

        res = self.client.patch(detail, {"excluded_from_budget": True}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(self._accounts()[0]["card"], 100000)

        res = self.client.delete(detail)
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Expense.objects.filter(id=expense_id).exists())

    def test_expense_validation(self):
        res = self._create_expense(amount=0)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self._create_expense(payment_method="crypto")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Expense.objects.exists())

    def test_expense_list_filters(self):
        self._create_expense(merchant="Korzinka", category_id="groceries")
        self._create_expense(merchant="Yandex Go", category_id="taxi", expense_date="2026-03-05")

        res = self.client.get(reverse("ledger-expenses"), {"category_id": "taxi"})
        self.assertEqual([e["merchant"] for e in res.data], ["Yandex Go"])

        res = self.client.get(reverse("ledger-expenses"), {"search": "korz"})
        self.assertEqual([e["merchant"] for e in res.data], ["Korzinka"])

        res = self.client.get(reverse("ledger-expenses"), {"date_from": "2026-03-01"})
        self.assertEqual(len(res.data), 1)

    def test_foreign_expense_is_404(self):
        other = make_user()
        accounts_for(other)
        expense = create_expense(user=other, amount=100, merchant="Bolt", category_id="taxi")
        detail = reverse("ledger-expense-detail", args=[expense.id])

        self.assertEqual(self.client.get(detail).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(
            self.client.patch(detail, {"amount": 1}, format="json").status_code,
            status.HTTP_404_NOT_FOUND,
        )
        self.assertEqual(self.client.delete(detail).status_code, status.HTTP_404_NOT_FOUND)

    def test_storage_failure_is_503_and_nothing_is_saved(self):
        with patch(
            "ledger.services.journal.post_entry",
            side_effect=StorageFailureError("ledger down"),
        ):
            res = self._create_expense()

        self.assertEqual(res.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertFalse(Expense.objects.exists())

    def test_bulk_delete(self):
        ids = [self._create_expense().data["id"] for _ in range(2)]
        missing = str(uuid.uuid4())

        res = self.client.post(
            reverse("ledger-expenses-bulk-delete"),
            {"ids": ids + [missing]},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(res.data["deleted"]), sorted(ids))
        self.assertEqual(res.data["not_found"], [missing])
        self.assertTrue(res.data["ok"])

    def test_transfer_endpoints(self):
        res = self.client.post(
            reverse("ledger-transfers"),
            {
                "from_account_id": self.card.id,
                "to_account_id": self.cash.id,
                "amount": 20000,
                "transfer_date": "2026-02-21",
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(self._accounts()[0], {"card": 80000, "cash": 20000})

        listing = self.client.get(reverse("ledger-transfers"))
        self.assertEqual(len(listing.data), 1)

        res = self.client.delete(reverse("ledger-transfer-detail", args=[res.data["id"]]))
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self._accounts()[0], {"card": 100000, "cash": 0})

    def test_transfer_to_same_account_is_400(self):
        res = self.client.post(
            reverse("ledger-transfers"),
            {
                "from_account_id": self.card.id,
                "to_account_id": self.card.id,
                "amount": 100,
                "transfer_date": "2026-02-21",
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Transfer.objects.exists())

    def test_salary_receive_is_idempotent(self):
        res = self.client.post(
            reverse("ledger-salary-payments"),
            {"period": "2026-03/1", "pay_date": "2026-03-10", "amount": 40000},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        receive = reverse("ledger-salary-payment-receive", args=[res.data["id"]])

        first = self.client.post(receive)
        second = self.client.post(receive)

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(first.data["id"], second.data["id"])
        self.assertEqual(LedgerEntry.objects.filter(source_type="salary_payment").count(), 1)
        self.assertEqual(self._accounts()[0]["card"], 140000)

    def test_balance_correction(self):
        url = reverse("ledger-correct-balance")

        res = self.client.post(url, {"card": 5000, "password": "wrong"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        res = self.client.post(url, {"card": 5000, "cash": 700, "password": PASSWORD}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total"], 5700)

        res = self.client.post(url, {"password": PASSWORD}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_convert_to_withdrawal(self):
        expense_id = self._create_expense(merchant="UZCASH ATM", amount=30000).data["id"]

        res = self.client.post(reverse("ledger-expense-convert-to-withdrawal", args=[expense_id]))

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Transfer.objects.filter(id=res.data["transfer_id"]).exists())
        self.assertEqual(self._accounts()[0], {"card": 70000, "cash": 30000})

        again = self.client.post(reverse("ledger-expense-convert-to-withdrawal", args=[expense_id]))
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)

    def test_entries_listing(self):
        self._create_expense(payment_method="cash")
        self._create_expense(merchant="Makro")

        res = self.client.get(reverse("ledger-entries"), {"account": "cash"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data), 1)
        self.assertEqual(res.data[0]["source_label"], "Expense")
        self.assertEqual(res.data[0]["signed_amount"], -5000)

        res = self.client.get(reverse("ledger-entries"), {"limit": 500})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reconcile_endpoint(self):
        self._create_expense()
        res = self.client.get(reverse("ledger-reconcile"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["ok"])
