"""
Payment admin configuration.

Registers Payments and Invoices for operator visibility. Settlement
happens through the webhook reconciliation, never through the admin, so
the settlement fields are read-only.
"""

from django.contrib import admin

from payments.models import Invoice, InvoiceItem, Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """
    Admin configuration for Payment.

    Provides visibility into payments and their capture status.
    """

    list_display = [
        "id",
        "user",
        "amount_display",
        "payment_method",
        "is_paid",
        "paid_at",
        "receipt_email_sent",
        "created_at",
    ]
    list_filter = ["is_paid", "payment_method", "currency", "created_at"]
    search_fields = ["id", "user__email"]
    readonly_fields = [
        "id",
        "payment_result",
        "is_paid",
        "paid_at",
        "receipt_email_sent",
        "receipt_email_sent_at",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "user", "payment_method"),
            },
        ),
        (
            "Amount",
            {
                "fields": ("amount", "currency"),
            },
        ),
        (
            "Settlement",
            {
                "fields": ("is_paid", "paid_at", "payment_result"),
            },
        ),
        (
            "Receipt",
            {
                "fields": ("receipt_email_sent", "receipt_email_sent_at"),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def amount_display(self, obj: Payment) -> str:
        """Display the amount with its currency."""
        return f"{obj.amount} {obj.currency.upper()}"

    amount_display.short_description = "Amount"

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for payments (audit trail)."""
        return False


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    raw_id_fields = ["task", "task_assignment"]
    readonly_fields = ["created_at"]


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    """
    Admin configuration for Invoice.

    The state field is protected; state changes go through the service layer.
    """

    list_display = [
        "id",
        "contractor",
        "client",
        "total_price",
        "currency",
        "state",
        "payment",
        "paid_at",
        "created_at",
    ]
    list_filter = ["state", "currency", "created_at"]
    search_fields = ["id", "contractor__email", "client__email", "payment__id"]
    readonly_fields = ["id", "state", "payment", "paid_at", "created_at", "updated_at"]
    raw_id_fields = ["contractor", "client"]
    inlines = [InvoiceItemInline]
    ordering = ["-created_at"]
