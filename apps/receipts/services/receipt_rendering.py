"""
Receipt PDF Rendering
=====================

Stamps the fields of an issued receipt onto the single-page yearbook
receipt template. The template already carries the static layout and the
receipt prefix, so only four values are drawn:

    ========================  =========================  =====  =====
    Field                     Value                      x      top
    ========================  =========================  =====  =====
    Receipt number suffix     ``067``                    110    92
    Issued date               ``DD/MM/YYYY``             485    92
    Student name              upper-cased                295    127
    Class & section           upper-cased                525    127
    ========================  =========================  =====  =====

Offsets are measured down from the top edge of the template page; PDF
coordinates start at the bottom-left corner, so ``y = height - top``.

Example::

    renderer = ReceiptRenderer()
    pdf_bytes = renderer.render(receipt)
"""

import io
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from django.conf import settings
from django.utils import timezone
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from reportlab.pdfgen import canvas

from ..models import Receipt
from .exceptions import InvalidTransitionError, ReceiptRenderingError

logger = logging.getLogger(__name__)

DEFAULT_FONT_NAME = 'Helvetica-Bold'
DEFAULT_FONT_SIZE = 12

# (x, offset from top) for each stamped field
NUMBER_POSITION = (110, 92)
DATE_POSITION = (485, 92)
NAME_POSITION = (295, 127)
SECTION_POSITION = (525, 127)

DATE_FORMAT = '%d/%m/%Y'


class ReceiptRenderer:
    """Overlay issued-receipt fields onto the PDF template."""

    def __init__(
        self,
        template_path: Optional[str] = None,
        font_name: str = DEFAULT_FONT_NAME,
        font_size: int = DEFAULT_FONT_SIZE,
    ) -> None:
        self.template_path = Path(template_path or settings.RECEIPT_TEMPLATE_PATH)
        self.font_name = font_name
        self.font_size = font_size

    @staticmethod
    def filename_for(receipt: Receipt) -> str:
        return f"Receipt-{receipt.display_id}.pdf"

    @staticmethod
    def format_issued_date(receipt: Receipt) -> str:
        if not receipt.issued_at:
            return 'N/A'
        return timezone.localtime(receipt.issued_at).strftime(DATE_FORMAT)

    def field_values(self, receipt: Receipt) -> List[Tuple[Tuple[int, int], str]]:
        """Return the (position, text) pairs stamped for a receipt."""
        return [
            (NUMBER_POSITION, receipt.number_suffix),
            (DATE_POSITION, self.format_issued_date(receipt)),
            (NAME_POSITION, (receipt.student_name or '').upper()),
            (SECTION_POSITION, (receipt.section or '').upper()),
        ]

    def render(self, receipt: Receipt) -> bytes:
        """
        Render the receipt PDF.

        Args:
            receipt: Issued or used receipt

        Returns:
            PDF document bytes

        Raises:
            InvalidTransitionError: If the receipt has not been issued
            ReceiptRenderingError: If the template is missing or unreadable
        """
        if not receipt.is_issued:
            raise InvalidTransitionError(
                f"Receipt {receipt.display_id} has not been issued"
            )

        try:
            writer = PdfWriter(clone_from=self.template_path)
            page = writer.pages[0]
        except (OSError, PyPdfError, IndexError) as exc:
            raise ReceiptRenderingError(
                f"Cannot read receipt template {self.template_path}: {exc}"
            ) from exc

        width = float(page.mediabox.width)
        height = float(page.mediabox.height)

        page.merge_page(self._build_overlay(receipt, width, height))

        output = io.BytesIO()
        writer.write(output)

        logger.debug("Rendered PDF for receipt %s", receipt.display_id)
        return output.getvalue()

    def _build_overlay(self, receipt: Receipt, width: float, height: float):
        buffer = io.BytesIO()
        overlay = canvas.Canvas(buffer, pagesize=(width, height))
        overlay.setFont(self.font_name, self.font_size)
        overlay.setFillColorRGB(0, 0, 0)

        for (x, top), text in self.field_values(receipt):
            overlay.drawString(x, height - top, text)

        overlay.showPage()
        overlay.save()
        buffer.seek(0)
        return PdfReader(buffer).pages[0]
