from django.contrib import admin
from apps.receipts.models import Receipt


@admin.register(Receipt)
class ReceiptAdmin(admin.ModelAdmin):
    """Admin interface for yearbook receipts."""

    list_display = [
        'get_display_id',
        'state',
        'student_name',
        'section',
        'issuing_party',
        'issued_at',
        'used_by',
        'used_at',
    ]
    list_filter = ['state', 'section', 'issued_at']
    search_fields = [
        'receipt_number',
        'student_name',
        'section',
        'issuing_party',
        'used_by',
    ]
    # State changes go through the receipt services only
    readonly_fields = [
        'id',
        'receipt_number',
        'state',
        'student_name',
        'section',
        'issuing_party',
        'issued_at',
        'used_by',
        'used_at',
        'created_at',
        'updated_at',
    ]
    ordering = ['receipt_number']

    fieldsets = (
        ('Receipt', {
            'fields': ('id', 'receipt_number', 'state')
        }),
        ('Issuance', {
            'fields': ('student_name', 'section', 'issuing_party', 'issued_at')
        }),
        ('Usage', {
            'fields': ('used_by', 'used_at')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_display_id(self, obj):
        """Display formatted receipt id."""
        return obj.display_id
    get_display_id.short_description = 'Receipt'
    get_display_id.admin_order_field = 'receipt_number'

    def has_add_permission(self, request):
        """Receipts are created by init_receipts / grow_receipts."""
        return False
