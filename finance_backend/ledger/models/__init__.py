# ledger/models/__init__.py

"""
LEDGER MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from ledger.models.account import Account
from ledger.models.expense import Expense
from ledger.models.ledger import LedgerEntry
from ledger.models.salary import SalaryPayment
from ledger.models.transfer import Transfer

__all__ = [
    "Account",
    "LedgerEntry",
    "Expense",
    "Transfer",
    "SalaryPayment",
]
