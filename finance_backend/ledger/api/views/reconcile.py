# PATH: ledger/api/views/reconcile.py

"""
GET /api/ledger/reconcile/

Runs the read-only reconciliation for the current user. Always 200;
drift is reported in the body ("ok": false), not as an error status.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ledger.services.reconciliation_service import reconcile


class ReconcileView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["ledger"], responses={200: dict})
    def get(self, request, *args, **kwargs):
        report = reconcile(user=request.user)
        return Response(report.to_dict(), status=status.HTTP_200_OK)
