# PATH: ledger/api/views/accounts.py

"""
ACCOUNTS API

GET  /api/ledger/accounts/
    - Ensures the user's card + cash accounts exist
    - Returns each account with its computed balance, plus the total

POST /api/ledger/accounts/correct-balance/
    - Body: {"card": 123400, "cash": 5000, "password": "..."}
    - Re-anchors opening balances so computed balance == the given value
    - Wrong password -> 403, nothing changes
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ledger.api.errors import service_error_response
from ledger.api.serializers import AccountsOverviewSerializer, BalanceCorrectionSerializer
from ledger.services.account_registry import ensure_accounts
from ledger.services.balance_service import compute_balances, total_balance
from ledger.services.exceptions import LedgerServiceError
from ledger.services.opening_balance_service import correct_opening_balances


def _overview(user) -> dict:
    ensure_accounts(user=user)
    balances = compute_balances(user=user)
    return {
        "accounts": [b.to_dict() for b in balances],
        "total": total_balance(balances),
    }


class AccountsView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountsOverviewSerializer

    @extend_schema(tags=["ledger"], responses=AccountsOverviewSerializer)
    def get(self, request, *args, **kwargs):
        try:
            data = _overview(request.user)
        except LedgerServiceError as exc:
            return service_error_response(exc)
        return Response(AccountsOverviewSerializer(data).data, status=status.HTTP_200_OK)


class BalanceCorrectionView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = BalanceCorrectionSerializer

    @extend_schema(
        tags=["ledger"],
        request=BalanceCorrectionSerializer,
        responses={200: AccountsOverviewSerializer, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            correct_opening_balances(
                user=request.user,
                password=s.validated_data["password"],
                values=s.validated_data["values"],
            )
            data = _overview(request.user)
        except LedgerServiceError as exc:
            return service_error_response(exc)

        return Response(AccountsOverviewSerializer(data).data, status=status.HTTP_200_OK)
