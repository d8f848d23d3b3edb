# PATH: ledger/api/views/expenses.py

"""
EXPENSES API

GET    /api/ledger/expenses/                      list (django-filter: see ledger/api/filters.py)
POST   /api/ledger/expenses/                      create expense + ledger entry (atomic)
GET    /api/ledger/expenses/<id>/                 retrieve
PATCH  /api/ledger/expenses/<id>/                 update; ledger follows the exclusion table
DELETE /api/ledger/expenses/<id>/                 entry first, then expense
POST   /api/ledger/expenses/bulk-delete/          best-effort; per-id outcome returned
POST   /api/ledger/expenses/<id>/convert-to-withdrawal/
                                                  card -> cash transfer, expense excluded

All endpoints are scoped to request.user; foreign ids are 404.
"""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ledger.api.errors import service_error_response
from ledger.api.filters import ExpenseFilter
from ledger.api.serializers import (
    BulkDeleteSerializer,
    ExpenseSerializer,
    ExpenseWriteSerializer,
    TransferSerializer,
)
from ledger.models import Expense
from ledger.services.exceptions import LedgerServiceError, NotFoundError
from ledger.services.expense_service import (
    bulk_delete_expenses,
    create_expense,
    delete_expense,
    update_expense,
)
from ledger.services.withdrawal_service import convert_expense_to_withdrawal


class ExpenseListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ExpenseWriteSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = ExpenseFilter

    def get_queryset(self):
        return Expense.objects.filter(user=self.request.user).order_by("-expense_date", "-created_at")

    @extend_schema(tags=["ledger"], responses=ExpenseSerializer(many=True))
    def get(self, request, *args, **kwargs):
        qs = self.filter_queryset(self.get_queryset())
        return Response(ExpenseSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["ledger"],
        request=ExpenseWriteSerializer,
        responses={201: ExpenseSerializer, 400: dict, 503: dict},
    )
    def post(self, request, *args, **kwargs):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            expense = create_expense(user=request.user, **s.validated_data)
        except LedgerServiceError as exc:
            return service_error_response(exc)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


class ExpenseDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ExpenseWriteSerializer

    @extend_schema(tags=["ledger"], responses={200: ExpenseSerializer, 404: dict})
    def get(self, request, pk, *args, **kwargs):
        expense = Expense.objects.filter(user=request.user, id=pk).first()
        if expense is None:
            return service_error_response(NotFoundError("Expense not found"))
        return Response(ExpenseSerializer(expense).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["ledger"],
        request=ExpenseWriteSerializer,
        responses={200: ExpenseSerializer, 400: dict, 404: dict, 503: dict},
    )
    def patch(self, request, pk, *args, **kwargs):
        s = self.get_serializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            expense = update_expense(user=request.user, expense_id=pk, **s.validated_data)
        except LedgerServiceError as exc:
            return service_error_response(exc)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["ledger"], request=None, responses={204: None, 404: dict, 503: dict})
    def delete(self, request, pk, *args, **kwargs):
        try:
            delete_expense(user=request.user, expense_id=pk)
        except LedgerServiceError as exc:
            return service_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ExpenseBulkDeleteView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = BulkDeleteSerializer

    @extend_schema(tags=["ledger"], request=BulkDeleteSerializer, responses={200: dict, 400: dict})
    def post(self, request, *args, **kwargs):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = bulk_delete_expenses(user=request.user, expense_ids=s.validated_data["ids"])
        except LedgerServiceError as exc:
            return service_error_response(exc)

        return Response(result.to_dict(), status=status.HTTP_200_OK)


class ExpenseConvertToWithdrawalView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = TransferSerializer

    @extend_schema(
        tags=["ledger"],
        request=None,
        responses={201: TransferSerializer, 400: dict, 404: dict, 503: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        try:
            transfer = convert_expense_to_withdrawal(user=request.user, expense_id=pk)
        except LedgerServiceError as exc:
            return service_error_response(exc)

        return Response(
            {"transfer_id": str(transfer.id), "transfer": TransferSerializer(transfer).data},
            status=status.HTTP_201_CREATED,
        )
