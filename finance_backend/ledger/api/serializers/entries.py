# ledger/api/serializers/entries.py

from rest_framework import serializers

from ledger.models import LedgerEntry

SOURCE_LABELS = {
    LedgerEntry.SOURCE_EXPENSE: "Expense",
    LedgerEntry.SOURCE_TRANSFER: "Transfer",
    LedgerEntry.SOURCE_SALARY_PAYMENT: "Salary",
    LedgerEntry.SOURCE_CASH_WITHDRAWAL: "Cash withdrawal",
}


class LedgerEntrySerializer(serializers.ModelSerializer):
    account_type = serializers.CharField(source="account.account_type", read_only=True)
    signed_amount = serializers.IntegerField(read_only=True)
    source_label = serializers.SerializerMethodField()

    class Meta:
        model = LedgerEntry
        fields = [
            "id",
            "account",
            "account_type",
            "direction",
            "amount",
            "signed_amount",
            "occurred_on",
            "source_type",
            "source_label",
            "source_id",
            "merchant",
            "note",
            "created_at",
        ]
        read_only_fields = fields

    def get_source_label(self, obj) -> str:
        return SOURCE_LABELS.get(obj.source_type, obj.source_type)


class LedgerEntryQuerySerializer(serializers.Serializer):
    account = serializers.ChoiceField(choices=["all", "card", "cash"], required=False, default="all")
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=200, default=100)
