"""
Domain-specific exceptions for receipts services.

State-machine and pool errors are validation failures: they indicate a
usage error and are never retried. Store, rendering and delivery errors are
externally caused; they carry the underlying cause via exception chaining.
"""


class ReceiptsServiceError(Exception):
    """Base exception for all receipts service errors."""
    pass


class InvalidTransitionError(ReceiptsServiceError):
    """Raised when a receipt is not in the state an operation requires."""
    pass


class AlreadyInitializedError(ReceiptsServiceError):
    """Raised when pool initialization is attempted on a non-empty store."""
    pass


class InvalidCountError(ReceiptsServiceError):
    """Raised when a pool size or growth count is not positive."""
    pass


class InvalidIssueDataError(ReceiptsServiceError):
    """Raised when issuance data (name, section, issuer) is blank."""
    pass


class ReceiptNotFoundError(ReceiptsServiceError):
    """Raised when a receipt does not exist."""
    pass


class PossibleDuplicateError(ReceiptsServiceError):
    """Raised when the student name already holds an issued receipt.

    The matching receipts are available on ``matches`` so the caller can
    show them and ask for explicit confirmation.
    """

    def __init__(self, message, matches):
        super().__init__(message)
        self.matches = list(matches)


class ReceiptStoreError(ReceiptsServiceError):
    """Raised when the underlying store cannot complete a read or write."""
    pass


class ReceiptRenderingError(ReceiptsServiceError):
    """Raised when the receipt PDF cannot be produced."""
    pass


class DeliveryFailureError(ReceiptsServiceError):
    """Raised when the receipt email cannot be delivered."""
    pass
