# ledger/api/urls.py

from django.urls import path

from ledger.api.views.accounts import AccountsView, BalanceCorrectionView
from ledger.api.views.entries import LedgerEntryListView
from ledger.api.views.expenses import (
    ExpenseBulkDeleteView,
    ExpenseConvertToWithdrawalView,
    ExpenseDetailView,
    ExpenseListCreateView,
)
from ledger.api.views.reconcile import ReconcileView
from ledger.api.views.salary import (
    SalaryPaymentDetailView,
    SalaryPaymentListCreateView,
    SalaryPaymentReceiveView,
)
from ledger.api.views.transfers import TransferDetailView, TransferListCreateView

urlpatterns = [
    # Accounts & balances
    path("accounts/", AccountsView.as_view(), name="ledger-accounts"),
    path("accounts/correct-balance/", BalanceCorrectionView.as_view(), name="ledger-correct-balance"),
    # Expenses
    path("expenses/", ExpenseListCreateView.as_view(), name="ledger-expenses"),
    path("expenses/bulk-delete/", ExpenseBulkDeleteView.as_view(), name="ledger-expenses-bulk-delete"),
    path("expenses/<uuid:pk>/", ExpenseDetailView.as_view(), name="ledger-expense-detail"),
    path(
        "expenses/<uuid:pk>/convert-to-withdrawal/",
        ExpenseConvertToWithdrawalView.as_view(),
        name="ledger-expense-convert-to-withdrawal",
    ),
    # Transfers
    path("transfers/", TransferListCreateView.as_view(), name="ledger-transfers"),
    path("transfers/<uuid:pk>/", TransferDetailView.as_view(), name="ledger-transfer-detail"),
    # Salary
    path("salary-payments/", SalaryPaymentListCreateView.as_view(), name="ledger-salary-payments"),
    path("salary-payments/<uuid:pk>/", SalaryPaymentDetailView.as_view(), name="ledger-salary-payment-detail"),
    path(
        "salary-payments/<uuid:pk>/receive/",
        SalaryPaymentReceiveView.as_view(),
        name="ledger-salary-payment-receive",
    ),
    # Journal & audit
    path("entries/", LedgerEntryListView.as_view(), name="ledger-entries"),
    path("reconcile/", ReconcileView.as_view(), name="ledger-reconcile"),
]
