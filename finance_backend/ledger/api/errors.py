# ledger/api/errors.py

"""
Domain error -> HTTP mapping for ledger views.

    NotFoundError         -> 404
    ReauthenticationError -> 403
    IdempotencyError      -> 409
    InvalidStateError     -> 400  (AccountResolutionError included)
    StorageFailureError   -> 503  (transient, client may retry)
"""

from rest_framework import status
from rest_framework.response import Response

from ledger.services.exceptions import (
    IdempotencyError,
    InvalidStateError,
    LedgerServiceError,
    NotFoundError,
    ReauthenticationError,
    StorageFailureError,
)

_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ReauthenticationError, status.HTTP_403_FORBIDDEN),
    (IdempotencyError, status.HTTP_409_CONFLICT),
    (InvalidStateError, status.HTTP_400_BAD_REQUEST),
    (StorageFailureError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def service_error_response(exc: LedgerServiceError) -> Response:
    for error_class, http_status in _STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return Response({"detail": str(exc)}, status=http_status)
    return Response({"detail": str(exc)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
