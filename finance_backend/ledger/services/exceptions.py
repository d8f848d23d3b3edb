# ledger/services/exceptions.py

"""
LEDGER SERVICE ERRORS

Centralized domain errors for ledger services.

- NotFoundError        -> record missing or not owned by the acting user
- InvalidStateError    -> operation not valid for the current data
- StorageFailureError  -> database read/write failed (transient, retryable)
- ReauthenticationError-> privileged operation rejected (password re-check)
- IdempotencyError     -> source already posted (callers decide if that is a no-op)

Reconciliation findings are NOT exceptions; they are reported data.
"""


class LedgerServiceError(Exception):
    """Base exception for all ledger service failures."""


class NotFoundError(LedgerServiceError):
    """Raised when a referenced account or source record does not exist for the user."""


class InvalidStateError(LedgerServiceError):
    """Raised when the requested mutation is not valid (e.g. transfer from == to)."""


class AccountResolutionError(InvalidStateError):
    """Raised when a payment method cannot be resolved to one of the user's accounts."""


class StorageFailureError(LedgerServiceError):
    """Raised when an underlying read/write fails. Safe to retry at the caller's discretion."""


class ReauthenticationError(LedgerServiceError):
    """Raised when a privileged operation fails its password re-check."""


class IdempotencyError(LedgerServiceError):
    """Raised when an entry already exists for the same source (duplicate or retried posting)."""
