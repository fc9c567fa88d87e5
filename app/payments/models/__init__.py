"""
Payment domain models.

- Payment: A client's payment, PENDING until a verified charge marks it PAID
- Invoice: A contractor's bill to a client, settled by a Payment
- InvoiceItem: One billed task on an Invoice
"""

from payments.models.invoice import Invoice, InvoiceItem
from payments.models.payment import Payment, PaymentQuerySet

__all__ = [
    "Invoice",
    "InvoiceItem",
    "Payment",
    "PaymentQuerySet",
]
