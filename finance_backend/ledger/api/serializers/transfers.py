# ledger/api/serializers/transfers.py

from rest_framework import serializers

from ledger.models import Transfer


class TransferSerializer(serializers.ModelSerializer):
    from_account_type = serializers.CharField(source="from_account.account_type", read_only=True)
    to_account_type = serializers.CharField(source="to_account.account_type", read_only=True)

    class Meta:
        model = Transfer
        fields = [
            "id",
            "from_account",
            "from_account_type",
            "to_account",
            "to_account_type",
            "amount",
            "transfer_date",
            "note",
            "created_at",
        ]
        read_only_fields = fields


class TransferCreateSerializer(serializers.Serializer):
    from_account_id = serializers.IntegerField()
    to_account_id = serializers.IntegerField()
    amount = serializers.IntegerField(min_value=1)
    transfer_date = serializers.DateField()
    note = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        if attrs["from_account_id"] == attrs["to_account_id"]:
            raise serializers.ValidationError("from_account_id and to_account_id must differ")
        return attrs


class TransferListQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=200, default=100)
