"""
Receipt Store
=============

Durable, order-preserving access to receipt records with a push-based
change feed. All database access of the receipts services goes through
:class:`ReceiptStore` so the services never cache authoritative state:
every operation re-reads what it needs.

Change feed::

    store = ReceiptStore()
    unsubscribe = store.subscribe(lambda receipts: print(len(receipts)))
    ...
    unsubscribe()

Subscribers receive the full ordered snapshot (never a diff) after each
committed write.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterable, List

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import Max

from ..models import Receipt
from .exceptions import ReceiptNotFoundError, ReceiptStoreError
from ..signals import receipts_changed

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[List[Receipt]], None]


@contextmanager
def _store_errors(action):
    """Re-raise database failures as ReceiptStoreError with the cause attached."""
    try:
        yield
    except DatabaseError as exc:
        raise ReceiptStoreError(f"Receipt store failed to {action}: {exc}") from exc


class ReceiptStore:
    """
    Django ORM backed receipt store.

    Methods:
        all: Ordered read of every receipt.
        get: Point read by id.
        save: Point write of selected fields.
        create_batch: All-or-nothing multi-row create.
        subscribe: Register a snapshot callback on the change feed.
    """

    def all(self) -> List[Receipt]:
        """Return every receipt ordered by receipt number."""
        with _store_errors('read receipts'):
            return list(Receipt.objects.order_by('receipt_number', 'created_at'))

    def get(self, receipt_id, *, for_update: bool = False) -> Receipt:
        """
        Get a receipt by id.

        Args:
            receipt_id: Receipt UUID (malformed ids are treated as missing)
            for_update: Lock the row until the surrounding transaction ends

        Returns:
            Receipt instance

        Raises:
            ReceiptNotFoundError: If receipt doesn't exist
            ReceiptStoreError: If the read fails
        """
        with _store_errors('read receipt'):
            queryset = Receipt.objects.all()
            if for_update:
                queryset = queryset.select_for_update()
            try:
                return queryset.get(id=receipt_id)
            except (Receipt.DoesNotExist, ValidationError, ValueError):
                raise ReceiptNotFoundError(f"Receipt {receipt_id} not found")

    def save(self, receipt: Receipt, *, update_fields: Iterable[str]) -> Receipt:
        """Write the given fields of a receipt and publish after commit."""
        fields = list(update_fields) + ['updated_at']
        with _store_errors('save receipt'):
            receipt.save(update_fields=fields)
        transaction.on_commit(self._publish)
        return receipt

    def create_batch(self, numbers: Iterable[int]) -> List[Receipt]:
        """
        Create unissued receipts for the given numbers in one transaction.

        Either every receipt is created or none is.
        """
        with _store_errors('create receipts'):
            with transaction.atomic():
                receipts = Receipt.objects.bulk_create(
                    [Receipt(receipt_number=number) for number in numbers]
                )
        transaction.on_commit(self._publish)
        return receipts

    def count(self) -> int:
        with _store_errors('count receipts'):
            return Receipt.objects.count()

    def is_empty(self) -> bool:
        with _store_errors('read receipts'):
            return not Receipt.objects.exists()

    def max_receipt_number(self) -> int:
        """Highest receipt number across all rows, 0 for an empty store."""
        with _store_errors('read receipt numbers'):
            result = Receipt.objects.aggregate(max_number=Max('receipt_number'))
        return result['max_number'] or 0

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        """
        Register a callback for the change feed.

        Args:
            callback: Called with the full ordered list of receipts after
                every committed write

        Returns:
            Function that removes the subscription
        """
        def receiver(sender, receipts, **kwargs):
            callback(receipts)

        receipts_changed.connect(receiver, weak=False)

        def unsubscribe():
            receipts_changed.disconnect(receiver)

        return unsubscribe

    def _publish(self):
        try:
            snapshot = self.all()
        except ReceiptStoreError:
            # The write itself committed; subscribers catch up on the next change
            logger.exception("Could not read snapshot for change feed")
            return

        results = receipts_changed.send_robust(sender=self.__class__, receipts=snapshot)
        for receiver, response in results:
            if isinstance(response, Exception):
                logger.error(
                    "Change feed subscriber %r failed: %s", receiver, response,
                    exc_info=response,
                )
