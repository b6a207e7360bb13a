"""Display formatting for receipt numbers."""

from typing import Optional

from django.conf import settings


def receipt_number_suffix(receipt_number: int) -> str:
    """
    Zero-pad a receipt number to at least three digits.

    Args:
        receipt_number: The numeric receipt number

    Returns:
        Padded number string (e.g. "007", "042", "101", "1234")
    """
    return str(receipt_number).zfill(3)


def format_receipt_id(receipt_number: int, prefix: Optional[str] = None) -> str:
    """
    Format a receipt number with the configured prefix.

    Args:
        receipt_number: The numeric receipt number
        prefix: Override for settings.RECEIPT_PREFIX

    Returns:
        Formatted receipt id (e.g. "YB25-001", "YB25-042", "YB25-101")
    """
    prefix = prefix or settings.RECEIPT_PREFIX
    return f"{prefix}-{receipt_number_suffix(receipt_number)}"
