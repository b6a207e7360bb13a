from django.db import models
import uuid

from .formatting import format_receipt_id, receipt_number_suffix


class ReceiptState(models.TextChoices):
    UNISSUED = 'unissued', 'Not Issued'
    ISSUED = 'issued', 'Issued'
    USED = 'used', 'Used'


class Receipt(models.Model):
    """Numbered receipt from the pool, issued once to a student."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Not unique at the storage layer: numbering is kept contiguous by the pool services
    receipt_number = models.PositiveIntegerField(db_index=True)

    state = models.CharField(
        max_length=20,
        choices=ReceiptState.choices,
        default=ReceiptState.UNISSUED
    )

    # Issuance (present iff state != unissued)
    student_name = models.CharField(max_length=200, blank=True)
    section = models.CharField(max_length=50, blank=True)
    issuing_party = models.CharField(max_length=200, blank=True)
    issued_at = models.DateTimeField(null=True, blank=True)

    # Collection (present iff state == used)
    used_by = models.CharField(max_length=200, blank=True)
    used_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'receipts'
        indexes = [
            models.Index(fields=['state'], name='receipts_state_idx'),
            models.Index(fields=['student_name'], name='receipts_student_name_idx'),
        ]
        ordering = ['receipt_number', 'created_at']

    def __str__(self):
        if self.is_issued:
            return f"{self.display_id} - {self.student_name} ({self.state})"
        return f"{self.display_id} ({self.state})"

    @property
    def display_id(self):
        return format_receipt_id(self.receipt_number)

    @property
    def number_suffix(self):
        return receipt_number_suffix(self.receipt_number)

    @property
    def is_issued(self):
        """True for issued and used receipts."""
        return self.state != ReceiptState.UNISSUED

    @property
    def is_used(self):
        return self.state == ReceiptState.USED
