# ledger/api/serializers/accounts.py

from rest_framework import serializers

from ledger.models import Account


class AccountBalanceSerializer(serializers.Serializer):
    """
    Output serializer for balance_service.AccountBalance.
    """

    account_id = serializers.IntegerField()
    account_type = serializers.CharField()
    name = serializers.CharField()
    opening_balance = serializers.IntegerField()
    computed_balance = serializers.IntegerField()


class AccountsOverviewSerializer(serializers.Serializer):
    accounts = AccountBalanceSerializer(many=True)
    total = serializers.IntegerField()


class BalanceCorrectionSerializer(serializers.Serializer):
    """
    Input serializer for the password-gated opening balance correction.

    Send the balance the user actually sees for card and/or cash.
    """

    card = serializers.IntegerField(required=False, allow_null=True)
    cash = serializers.IntegerField(required=False, allow_null=True)
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        values = {
            account_type: attrs[account_type]
            for account_type in (Account.CARD, Account.CASH)
            if attrs.get(account_type) is not None
        }
        if not values:
            raise serializers.ValidationError("Provide at least one of: card, cash")
        attrs["values"] = values
        return attrs
