# ledger/api/serializers/salary.py

from rest_framework import serializers

from ledger.models import SalaryPayment


class SalaryPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = SalaryPayment
        fields = [
            "id",
            "period",
            "pay_date",
            "amount",
            "received",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ("id", "created_at", "updated_at")

    def validate_period(self, value):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("period is required")
        return v


class SalaryPaymentQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(required=False, min_value=2000, max_value=2100)
    month = serializers.IntegerField(required=False, min_value=1, max_value=12)
