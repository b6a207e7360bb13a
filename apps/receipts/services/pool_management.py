"""Receipt pool initialization and growth service."""

import logging
from typing import Dict, List, Optional

from django.conf import settings
from django.db import transaction

from ..models import Receipt, ReceiptState
from .exceptions import AlreadyInitializedError, InvalidCountError
from .receipt_store import ReceiptStore

logger = logging.getLogger(__name__)


@transaction.atomic
def initialize_pool(
    *,
    size: Optional[int] = None,
    store: Optional[ReceiptStore] = None
) -> List[Receipt]:
    """
    Create the initial pool of unissued receipts numbered 1..size.

    Args:
        size: Number of receipts (defaults to settings.RECEIPTS_DEFAULT_POOL_SIZE)
        store: Receipt store to write to

    Returns:
        List of created receipts in number order

    Raises:
        InvalidCountError: If size is not positive
        AlreadyInitializedError: If the store already holds receipts
    """
    store = store or ReceiptStore()
    if size is None:
        size = settings.RECEIPTS_DEFAULT_POOL_SIZE

    if size <= 0:
        raise InvalidCountError(f"Pool size must be positive, got {size}")

    if not store.is_empty():
        raise AlreadyInitializedError("Receipt pool is already initialized")

    receipts = store.create_batch(range(1, size + 1))
    logger.info("Initialized receipt pool with %d receipts", size)
    return receipts


@transaction.atomic
def grow_pool(
    *,
    count: int,
    store: Optional[ReceiptStore] = None
) -> List[Receipt]:
    """
    Append unissued receipts after the current highest number.

    The maximum is read fresh from every stored row rather than from a
    counter, since rows may be added out of band. Two concurrent calls can
    still read the same maximum and collide; nothing at the storage layer
    prevents that.

    Args:
        count: Number of receipts to add
        store: Receipt store to write to

    Returns:
        List of created receipts numbered max+1..max+count

    Raises:
        InvalidCountError: If count is not positive
    """
    if count <= 0:
        raise InvalidCountError(f"Count must be positive, got {count}")

    store = store or ReceiptStore()
    current_max = store.max_receipt_number()

    receipts = store.create_batch(range(current_max + 1, current_max + count + 1))
    logger.info(
        "Grew receipt pool by %d (numbers %d-%d)",
        count, current_max + 1, current_max + count,
    )
    return receipts


def get_pool_summary(*, store: Optional[ReceiptStore] = None) -> Dict[str, int]:
    """
    Count receipts per state.

    Returns:
        Dict with keys: total, unissued, issued, used
    """
    store = store or ReceiptStore()
    receipts = store.all()

    summary = {
        'total': len(receipts),
        'unissued': 0,
        'issued': 0,
        'used': 0,
    }
    for receipt in receipts:
        summary[ReceiptState(receipt.state).value] += 1

    return summary
