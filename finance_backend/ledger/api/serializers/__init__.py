# ledger/api/serializers/__init__.py

from ledger.api.serializers.accounts import (
    AccountBalanceSerializer,
    AccountsOverviewSerializer,
    BalanceCorrectionSerializer,
)
from ledger.api.serializers.entries import LedgerEntryQuerySerializer, LedgerEntrySerializer
from ledger.api.serializers.expenses import (
    BulkDeleteSerializer,
    ExpenseSerializer,
    ExpenseWriteSerializer,
)
from ledger.api.serializers.salary import SalaryPaymentQuerySerializer, SalaryPaymentSerializer
from ledger.api.serializers.transfers import (
    TransferCreateSerializer,
    TransferListQuerySerializer,
    TransferSerializer,
)

__all__ = [
    "AccountBalanceSerializer",
    "AccountsOverviewSerializer",
    "BalanceCorrectionSerializer",
    "LedgerEntrySerializer",
    "LedgerEntryQuerySerializer",
    "ExpenseSerializer",
    "ExpenseWriteSerializer",
    "BulkDeleteSerializer",
    "SalaryPaymentSerializer",
    "SalaryPaymentQuerySerializer",
    "TransferSerializer",
    "TransferCreateSerializer",
    "TransferListQuerySerializer",
]
