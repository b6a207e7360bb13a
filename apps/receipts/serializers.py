from rest_framework import serializers
from .models import Receipt


# =============================================================================
# Input Serializers
# =============================================================================

class InitializePoolInputSerializer(serializers.Serializer):
    """
    Validate input for pool initialization.

    Fields:
        size (int): Optional pool size, defaults to the configured size
    """

    size = serializers.IntegerField(required=False)


class GrowPoolInputSerializer(serializers.Serializer):
    """
    Validate input for pool growth.

    Fields:
        count (int): Number of receipts to append
    """

    count = serializers.IntegerField(required=True)


class IssueReceiptInputSerializer(serializers.Serializer):
    """
    Validate input for issuing a receipt.

    Fields:
        student_name (str): Student receiving the receipt
        section (str): Class and section (e.g. "XII-B")
        confirm_duplicate (bool): Issue even if the name already holds a receipt
        recipient_email (str): Optional address to email the PDF to
    """

    student_name = serializers.CharField(max_length=200, trim_whitespace=False)
    section = serializers.CharField(max_length=50, trim_whitespace=False)
    confirm_duplicate = serializers.BooleanField(required=False, default=False)
    recipient_email = serializers.EmailField(required=False)


class SendReceiptInputSerializer(serializers.Serializer):
    """Validate input for emailing a receipt."""

    recipient_email = serializers.EmailField(required=True)


class DuplicateQuerySerializer(serializers.Serializer):
    """Validate query parameters for duplicate lookup."""

    name = serializers.CharField(required=True)


class SearchQuerySerializer(serializers.Serializer):
    """
    Validate query parameters for public search.

    Query Parameters:
        q (str): Search text
        by_name (bool): Search by student name (default) or receipt number
    """

    q = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False, default='')
    by_name = serializers.BooleanField(required=False, default=True)


class SuggestQuerySerializer(serializers.Serializer):
    """Validate query parameters for name autosuggest."""

    q = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False, default='')


# =============================================================================
# Output Serializers
# =============================================================================

class ReceiptSerializer(serializers.ModelSerializer):
    """Full receipt for issuers."""

    display_id = serializers.CharField(read_only=True)

    class Meta:
        model = Receipt
        fields = [
            'id',
            'receipt_number',
            'display_id',
            'state',
            'student_name',
            'section',
            'issuing_party',
            'issued_at',
            'used_by',
            'used_at',
        ]
        read_only_fields = fields


class PoolSummarySerializer(serializers.Serializer):
    total = serializers.IntegerField()
    unissued = serializers.IntegerField()
    issued = serializers.IntegerField()
    used = serializers.IntegerField()


class DuplicateWarningSerializer(serializers.Serializer):
    error = serializers.CharField()
    matches = ReceiptSerializer(many=True)
