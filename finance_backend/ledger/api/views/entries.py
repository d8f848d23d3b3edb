# PATH: ledger/api/views/entries.py

"""
LEDGER ENTRIES API (READ-ONLY)

GET /api/ledger/entries/?account=all|card|cash&date_from=&date_to=&limit=

Newest first (occurred_on, then created_at). Each row carries a
human-readable source_label.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ledger.api.serializers import LedgerEntryQuerySerializer, LedgerEntrySerializer
from ledger.models import LedgerEntry


class LedgerEntryListView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = LedgerEntrySerializer

    @extend_schema(
        tags=["ledger"],
        parameters=[LedgerEntryQuerySerializer],
        responses=LedgerEntrySerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        q = LedgerEntryQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        params = q.validated_data

        qs = LedgerEntry.objects.filter(user=request.user).select_related("account")

        if params["account"] != "all":
            qs = qs.filter(account__account_type=params["account"])
        if params.get("date_from"):
            qs = qs.filter(occurred_on__gte=params["date_from"])
        if params.get("date_to"):
            qs = qs.filter(occurred_on__lte=params["date_to"])

        qs = qs.order_by("-occurred_on", "-created_at")[: params["limit"]]
        return Response(LedgerEntrySerializer(qs, many=True).data, status=status.HTTP_200_OK)
