# PATH: ledger/api/views/salary.py

"""
SALARY PAYMENTS API

GET    /api/ledger/salary-payments/?year=&month=
POST   /api/ledger/salary-payments/                 received=true posts income
PATCH  /api/ledger/salary-payments/<id>/            received toggle adds/removes income
DELETE /api/ledger/salary-payments/<id>/            income entry first, then record
POST   /api/ledger/salary-payments/<id>/receive/    idempotent "mark received"
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ledger.api.errors import service_error_response
from ledger.api.serializers import (
    LedgerEntrySerializer,
    SalaryPaymentQuerySerializer,
    SalaryPaymentSerializer,
)
from ledger.services.exceptions import LedgerServiceError
from ledger.services.salary_service import (
    create_payment,
    delete_payment,
    list_payments,
    mark_payment_received,
    update_payment,
)


class SalaryPaymentListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = SalaryPaymentSerializer

    @extend_schema(
        tags=["ledger"],
        parameters=[SalaryPaymentQuerySerializer],
        responses=SalaryPaymentSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        q = SalaryPaymentQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)

        qs = list_payments(
            user=request.user,
            year=q.validated_data.get("year"),
            month=q.validated_data.get("month"),
        )
        return Response(SalaryPaymentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["ledger"],
        request=SalaryPaymentSerializer,
        responses={201: SalaryPaymentSerializer, 400: dict, 503: dict},
    )
    def post(self, request, *args, **kwargs):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            payment = create_payment(user=request.user, **s.validated_data)
        except LedgerServiceError as exc:
            return service_error_response(exc)

        return Response(SalaryPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class SalaryPaymentDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = SalaryPaymentSerializer

    @extend_schema(
        tags=["ledger"],
        request=SalaryPaymentSerializer,
        responses={200: SalaryPaymentSerializer, 400: dict, 404: dict, 503: dict},
    )
    def patch(self, request, pk, *args, **kwargs):
        s = self.get_serializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            payment = update_payment(user=request.user, payment_id=pk, **s.validated_data)
        except LedgerServiceError as exc:
            return service_error_response(exc)

        return Response(SalaryPaymentSerializer(payment).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["ledger"], request=None, responses={204: None, 404: dict, 503: dict})
    def delete(self, request, pk, *args, **kwargs):
        try:
            delete_payment(user=request.user, payment_id=pk)
        except LedgerServiceError as exc:
            return service_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)


class SalaryPaymentReceiveView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = LedgerEntrySerializer

    @extend_schema(tags=["ledger"], request=None, responses={200: LedgerEntrySerializer, 404: dict, 503: dict})
    def post(self, request, pk, *args, **kwargs):
        try:
            entry = mark_payment_received(user=request.user, payment_id=pk)
        except LedgerServiceError as exc:
            return service_error_response(exc)
        return Response(LedgerEntrySerializer(entry).data, status=status.HTTP_200_OK)
