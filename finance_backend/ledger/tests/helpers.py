# ledger/tests/helpers.py

from __future__ import annotations

import uuid
from datetime import date

from django.contrib.auth import get_user_model

from ledger.models import Account
from ledger.services.account_registry import ensure_accounts
from ledger.services.balance_service import compute_balances

User = get_user_model()

PASSWORD = "S3cure-pass-123"

# Cutover in backend.settings.test is 2026-02-20.
AFTER_CUTOVER = date(2026, 2, 21)
BEFORE_CUTOVER = date(2026, 2, 19)


def make_user(email: str | None = None) -> User:
    email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
    return User.objects.create_user(email=email, password=PASSWORD)


def accounts_for(user, *, card_opening: int = 0, cash_opening: int = 0) -> tuple[Account, Account]:
    ids = ensure_accounts(user=user)
    Account.objects.filter(id=ids.card_id).update(opening_balance=card_opening)
    Account.objects.filter(id=ids.cash_id).update(opening_balance=cash_opening)
    return Account.objects.get(id=ids.card_id), Account.objects.get(id=ids.cash_id)


def balances(user) -> dict[str, int]:
    return {b.account_type: b.computed_balance for b in compute_balances(user=user)}
