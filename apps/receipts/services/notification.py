"""Receipt email delivery service."""

import logging
import smtplib
from typing import Optional

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from ..models import Receipt
from .exceptions import DeliveryFailureError
from .receipt_rendering import ReceiptRenderer

logger = logging.getLogger(__name__)


def send_receipt_email(
    *,
    receipt: Receipt,
    recipient_email: str,
    renderer: Optional[ReceiptRenderer] = None
) -> None:
    """
    Email the rendered receipt PDF to a student.

    Delivery is attempted once; failures are not retried.

    Args:
        receipt: Issued or used receipt
        recipient_email: Destination address
        renderer: Renderer used for the attachment

    Raises:
        InvalidTransitionError: If the receipt has not been issued
        ReceiptRenderingError: If the PDF cannot be rendered
        DeliveryFailureError: If the message cannot be sent
    """
    renderer = renderer or ReceiptRenderer()
    pdf_bytes = renderer.render(receipt)

    context = {
        'receipt': receipt,
        'receipt_id': receipt.display_id,
        'issued_date': renderer.format_issued_date(receipt),
    }
    message = EmailMultiAlternatives(
        subject=f"Your Yearbook Receipt {receipt.display_id} Has Been Issued",
        body=render_to_string('receipts/email/receipt_issued.txt', context),
        from_email=settings.RECEIPTS_EMAIL_FROM,
        to=[recipient_email],
        cc=list(settings.RECEIPTS_EMAIL_CC),
    )
    message.attach_alternative(
        render_to_string('receipts/email/receipt_issued.html', context),
        'text/html'
    )
    message.attach(renderer.filename_for(receipt), pdf_bytes, 'application/pdf')

    try:
        message.send(fail_silently=False)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error(
            "Failed to email receipt %s to %s: %s",
            receipt.display_id, recipient_email, exc,
        )
        raise DeliveryFailureError(
            f"Could not deliver receipt {receipt.display_id} to {recipient_email}"
        ) from exc

    logger.info("Emailed receipt %s to %s", receipt.display_id, recipient_email)
