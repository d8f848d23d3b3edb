# ledger/api/filters.py

"""
Query-string filters for ledger list endpoints (django-filter).

    /api/ledger/expenses/?date_from=2026-02-01&date_to=2026-02-28
    /api/ledger/expenses/?category_id=food&search=korzinka
    /api/ledger/expenses/?payment_method=cash&excluded_from_budget=false
"""

import django_filters

from ledger.models import Expense


class ExpenseFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name="expense_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="expense_date", lookup_expr="lte")
    search = django_filters.CharFilter(field_name="merchant", lookup_expr="icontains")

    class Meta:
        model = Expense
        fields = ["category_id", "payment_method", "excluded_from_budget", "origin"]
