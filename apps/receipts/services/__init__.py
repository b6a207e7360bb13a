"""
Receipts app services layer.

Services contain business logic and go through ReceiptStore for every read
and write. State-changing operations run in transactions and lock the
receipt row they transition.
"""

from .exceptions import (
    ReceiptsServiceError,
    InvalidTransitionError,
    AlreadyInitializedError,
    InvalidCountError,
    InvalidIssueDataError,
    ReceiptNotFoundError,
    PossibleDuplicateError,
    ReceiptStoreError,
    ReceiptRenderingError,
    DeliveryFailureError,
)
from .receipt_store import ReceiptStore
from .name_matching import (
    normalize_name,
    names_match,
    name_contains,
)
from .pool_management import (
    initialize_pool,
    grow_pool,
    get_pool_summary,
)
from .receipt_lifecycle import (
    check_duplicate,
    find_duplicates,
    get_receipt,
    commit_issue,
    issue_receipt,
    mark_used,
)
from .receipt_search import (
    SearchIndex,
    extract_receipt_number,
    suggest_names,
    search_receipts,
    SUGGESTION_LIMIT,
)
from .receipt_rendering import ReceiptRenderer
from .notification import send_receipt_email

__all__ = [
    # Exceptions
    'ReceiptsServiceError',
    'InvalidTransitionError',
    'AlreadyInitializedError',
    'InvalidCountError',
    'InvalidIssueDataError',
    'ReceiptNotFoundError',
    'PossibleDuplicateError',
    'ReceiptStoreError',
    'ReceiptRenderingError',
    'DeliveryFailureError',
    # Store
    'ReceiptStore',
    # Name Matching
    'normalize_name',
    'names_match',
    'name_contains',
    # Pool Management
    'initialize_pool',
    'grow_pool',
    'get_pool_summary',
    # Receipt Lifecycle
    'check_duplicate',
    'find_duplicates',
    'get_receipt',
    'commit_issue',
    'issue_receipt',
    'mark_used',
    # Search
    'SearchIndex',
    'extract_receipt_number',
    'suggest_names',
    'search_receipts',
    'SUGGESTION_LIMIT',
    # Rendering & Delivery
    'ReceiptRenderer',
    'send_receipt_email',
]
