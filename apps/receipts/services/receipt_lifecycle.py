"""
Receipt lifecycle service.

Each receipt moves through ``unissued -> issued -> used``. Issuance is split
into two phases so a caller can surface a duplicate-name warning and ask
for confirmation before writing:

1. :func:`check_duplicate` / :func:`find_duplicates` (read only)
2. :func:`commit_issue` (the write)

:func:`issue_receipt` combines both, raising :class:`PossibleDuplicateError`
unless ``check_duplicates=False`` is passed as the explicit confirmation.

The duplicate check is advisory: issuers working on different receipts at
the same time can both pass it for the same student.
"""

import logging
from typing import Iterable, List, Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from ..models import Receipt, ReceiptState
from .exceptions import (
    InvalidIssueDataError,
    InvalidTransitionError,
    PossibleDuplicateError,
    ReceiptStoreError,
)
from .name_matching import names_match
from .receipt_store import ReceiptStore

logger = logging.getLogger(__name__)


def check_duplicate(*, name: str, receipts: Iterable[Receipt]) -> List[Receipt]:
    """
    Find issued or used receipts held by the same student name.

    Names are compared with :func:`names_match`; section is not part of
    the key.

    Args:
        name: Candidate student name
        receipts: Receipts to scan

    Returns:
        Matching receipts in input order
    """
    return [
        receipt for receipt in receipts
        if receipt.state != ReceiptState.UNISSUED
        and names_match(receipt.student_name, name)
    ]


def find_duplicates(*, name: str, store: Optional[ReceiptStore] = None) -> List[Receipt]:
    """
    Best-effort duplicate scan over a fresh snapshot of the store.

    Returns an empty list if the snapshot cannot be read.
    """
    store = store or ReceiptStore()
    try:
        receipts = store.all()
    except ReceiptStoreError:
        logger.warning("Duplicate check for %r skipped: store unavailable", name, exc_info=True)
        return []

    return check_duplicate(name=name, receipts=receipts)


def get_receipt(*, receipt_id: UUID, store: Optional[ReceiptStore] = None) -> Receipt:
    """
    Get receipt by ID.

    Raises:
        ReceiptNotFoundError: If receipt doesn't exist
    """
    store = store or ReceiptStore()
    return store.get(receipt_id)


def _require_state(receipt: Receipt, expected: str, action: str) -> None:
    if receipt.state != expected:
        raise InvalidTransitionError(
            f"Cannot {action} receipt {receipt.display_id}: it is {receipt.get_state_display().lower()}"
        )


def _require_text(**values) -> None:
    blank = [field for field, value in values.items() if not (value or '').strip()]
    if blank:
        raise InvalidIssueDataError(f"Missing value for: {', '.join(blank)}")


@transaction.atomic
def commit_issue(
    *,
    receipt_id: UUID,
    student_name: str,
    section: str,
    issuing_party: str,
    store: Optional[ReceiptStore] = None
) -> Receipt:
    """
    Issue a receipt to a student without any duplicate check.

    Args:
        receipt_id: Receipt UUID
        student_name: Student name, stored verbatim
        section: Class and section, stored verbatim
        issuing_party: Name of the issuer

    Returns:
        Updated Receipt with state=issued

    Raises:
        ReceiptNotFoundError: If receipt doesn't exist
        InvalidTransitionError: If the receipt is not unissued
        InvalidIssueDataError: If any value is blank
    """
    store = store or ReceiptStore()
    _require_text(student_name=student_name, section=section, issuing_party=issuing_party)

    receipt = store.get(receipt_id, for_update=True)
    _require_state(receipt, ReceiptState.UNISSUED, 'issue')

    receipt.state = ReceiptState.ISSUED
    receipt.student_name = student_name
    receipt.section = section
    receipt.issuing_party = issuing_party
    receipt.issued_at = timezone.now()
    store.save(
        receipt,
        update_fields=['state', 'student_name', 'section', 'issuing_party', 'issued_at']
    )

    logger.info(
        "Receipt %s issued to %r (%s) by %r",
        receipt.display_id, student_name, section, issuing_party,
    )
    return receipt


def issue_receipt(
    *,
    receipt_id: UUID,
    student_name: str,
    section: str,
    issuing_party: str,
    check_duplicates: bool = True,
    store: Optional[ReceiptStore] = None
) -> Receipt:
    """
    Issue a receipt, warning first if the student already holds one.

    Args:
        receipt_id: Receipt UUID
        student_name: Student name
        section: Class and section
        issuing_party: Name of the issuer
        check_duplicates: If True, raises PossibleDuplicateError when the
            name matches an issued receipt. Pass False to confirm and
            issue anyway.

    Returns:
        Updated Receipt with state=issued

    Raises:
        ReceiptNotFoundError: If receipt doesn't exist
        InvalidTransitionError: If the receipt is not unissued
        InvalidIssueDataError: If any value is blank
        PossibleDuplicateError: If duplicates exist and check_duplicates is True
    """
    store = store or ReceiptStore()
    _require_text(student_name=student_name, section=section, issuing_party=issuing_party)

    receipt = store.get(receipt_id)
    _require_state(receipt, ReceiptState.UNISSUED, 'issue')

    if check_duplicates:
        matches = find_duplicates(name=student_name, store=store)
        if matches:
            numbers = ', '.join(match.display_id for match in matches)
            raise PossibleDuplicateError(
                f"'{student_name}' already holds receipt(s) {numbers}",
                matches
            )
    else:
        logger.info(
            "Issuing %s to %r with duplicate check skipped by %r",
            receipt.display_id, student_name, issuing_party,
        )

    return commit_issue(
        receipt_id=receipt.id,
        student_name=student_name,
        section=section,
        issuing_party=issuing_party,
        store=store,
    )


@transaction.atomic
def mark_used(
    *,
    receipt_id: UUID,
    used_by: str,
    store: Optional[ReceiptStore] = None
) -> Receipt:
    """
    Mark an issued receipt as used (yearbook handed over).

    Args:
        receipt_id: Receipt UUID
        used_by: Name of the issuer handing over the yearbook

    Returns:
        Updated Receipt with state=used

    Raises:
        ReceiptNotFoundError: If receipt doesn't exist
        InvalidTransitionError: If the receipt is unissued or already used
        InvalidIssueDataError: If used_by is blank
    """
    store = store or ReceiptStore()
    _require_text(used_by=used_by)

    receipt = store.get(receipt_id, for_update=True)
    _require_state(receipt, ReceiptState.ISSUED, 'mark used')

    receipt.state = ReceiptState.USED
    receipt.used_by = used_by
    receipt.used_at = timezone.now()
    store.save(receipt, update_fields=['state', 'used_by', 'used_at'])

    logger.info("Receipt %s marked used by %r", receipt.display_id, used_by)
    return receipt
