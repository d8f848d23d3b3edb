# ledger/api/serializers/expenses.py

from rest_framework import serializers

from ledger.models import Expense


class ExpenseSerializer(serializers.ModelSerializer):
    """
    Output serializer (DB truth).
    """

    class Meta:
        model = Expense
        fields = [
            "id",
            "amount",
            "expense_date",
            "merchant",
            "note",
            "category_id",
            "payment_method",
            "excluded_from_budget",
            "origin",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ExpenseWriteSerializer(serializers.Serializer):
    """
    Input serializer for create (all required fields) and PATCH (partial=True).
    """

    amount = serializers.IntegerField(min_value=1)
    expense_date = serializers.DateField(required=False)
    merchant = serializers.CharField(max_length=255)
    note = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
    category_id = serializers.CharField(max_length=64)
    payment_method = serializers.ChoiceField(choices=Expense.PAYMENT_METHODS, required=False)
    excluded_from_budget = serializers.BooleanField(required=False, allow_null=True)
    origin = serializers.ChoiceField(
        choices=[
            (Expense.ORIGIN_MANUAL, "Manual entry"),
            (Expense.ORIGIN_IMPORT, "Statement import"),
            (Expense.ORIGIN_ASSISTANT, "Assistant"),
        ],
        required=False,
    )

    def validate_merchant(self, value):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("merchant is required")
        return v

    def validate_category_id(self, value):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("category_id is required")
        return v

    def validate(self, attrs):
        if "note" in attrs:
            attrs["note"] = (attrs["note"] or "").strip() or None

        if self.partial:
            if attrs.get("excluded_from_budget", False) is None:
                raise serializers.ValidationError({"excluded_from_budget": "May not be null."})
            if "origin" in attrs:
                raise serializers.ValidationError({"origin": "Origin cannot be changed."})
        return attrs


class BulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
