# ledger/admin.py

"""
Admin is a read-only window onto the ledger.

Every write to expenses, transfers, salary payments and entries must go
through ledger.services so the journal stays consistent; the admin never
offers add/change/delete for them.
"""

from django.contrib import admin

from ledger.models import Account, Expense, LedgerEntry, SalaryPayment, Transfer


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(ReadOnlyAdmin):
    list_display = (
        "id",
        "user",
        "account_type",
        "name",
        "opening_balance",
        "updated_at",
    )
    list_filter = ("account_type",)
    search_fields = ("user__email", "name")
    ordering = ("user", "account_type")
    readonly_fields = ("user", "account_type", "name", "opening_balance", "created_at", "updated_at")


# ============================================================
# LEDGER ENTRY (WRITTEN ONLY BY ledger.services.journal)
# ============================================================


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdmin):
    list_display = (
        "id",
        "user",
        "account",
        "direction",
        "amount",
        "occurred_on",
        "source_type",
        "source_id",
        "created_at",
    )
    list_filter = ("direction", "source_type", "account__account_type")
    search_fields = ("user__email", "merchant", "note", "source_id")
    ordering = ("-occurred_on", "-created_at")
    date_hierarchy = "occurred_on"


# ============================================================
# SOURCE RECORDS
# ============================================================


@admin.register(Expense)
class ExpenseAdmin(ReadOnlyAdmin):
    list_display = (
        "id",
        "user",
        "expense_date",
        "merchant",
        "amount",
        "payment_method",
        "category_id",
        "excluded_from_budget",
        "origin",
    )
    list_filter = ("payment_method", "excluded_from_budget", "origin")
    search_fields = ("user__email", "merchant", "category_id")
    ordering = ("-expense_date",)
    date_hierarchy = "expense_date"


@admin.register(Transfer)
class TransferAdmin(ReadOnlyAdmin):
    list_display = ("id", "user", "from_account", "to_account", "amount", "transfer_date", "note")
    search_fields = ("user__email", "note")
    ordering = ("-transfer_date",)


@admin.register(SalaryPayment)
class SalaryPaymentAdmin(ReadOnlyAdmin):
    list_display = ("id", "user", "period", "pay_date", "amount", "received")
    list_filter = ("received",)
    search_fields = ("user__email", "period")
    ordering = ("-pay_date",)
