# PATH: ledger/api/views/transfers.py

"""
TRANSFERS API

GET    /api/ledger/transfers/?date_from=&date_to=&limit=
POST   /api/ledger/transfers/          record + both ledger legs (atomic)
DELETE /api/ledger/transfers/<id>/     legs first, then record
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ledger.api.errors import service_error_response
from ledger.api.serializers import (
    TransferCreateSerializer,
    TransferListQuerySerializer,
    TransferSerializer,
)
from ledger.services.exceptions import LedgerServiceError
from ledger.services.transfer_service import create_transfer, delete_transfer, list_transfers


class TransferListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = TransferCreateSerializer

    @extend_schema(
        tags=["ledger"],
        parameters=[TransferListQuerySerializer],
        responses=TransferSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        q = TransferListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)

        qs = list_transfers(
            user=request.user,
            date_from=q.validated_data.get("date_from"),
            date_to=q.validated_data.get("date_to"),
            limit=q.validated_data["limit"],
        )
        return Response(TransferSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["ledger"],
        request=TransferCreateSerializer,
        responses={201: TransferSerializer, 400: dict, 404: dict, 503: dict},
    )
    def post(self, request, *args, **kwargs):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            transfer = create_transfer(user=request.user, **s.validated_data)
        except LedgerServiceError as exc:
            return service_error_response(exc)

        return Response(TransferSerializer(transfer).data, status=status.HTTP_201_CREATED)


class TransferDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = TransferSerializer

    @extend_schema(tags=["ledger"], request=None, responses={204: None, 404: dict, 503: dict})
    def delete(self, request, pk, *args, **kwargs):
        try:
            delete_transfer(user=request.user, transfer_id=pk)
        except LedgerServiceError as exc:
            return service_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)
