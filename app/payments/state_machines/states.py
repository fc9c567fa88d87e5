"""
State enums for payment models.

Invoice States:
    open → awaiting_payment → paid
    open/awaiting_payment → cancelled

Payments themselves have a single boolean transition (is_paid false → true)
applied with a conditional UPDATE, so they need no enum here.
"""

from django.db import models


class InvoiceState(models.TextChoices):
    """
    States for the Invoice model lifecycle.

    Terminal states: PAID, CANCELLED

    State Flow:
        OPEN → AWAITING_PAYMENT (linked to a Payment)
        AWAITING_PAYMENT → PAID (Payment captured)

    Cancellation Flow:
        OPEN → CANCELLED
        AWAITING_PAYMENT → CANCELLED (before the charge succeeds)
    """

    OPEN = "open", "Open"
    AWAITING_PAYMENT = "awaiting_payment", "Awaiting Payment"
    PAID = "paid", "Paid"
    CANCELLED = "cancelled", "Cancelled"


class PaymentMethod(models.TextChoices):
    """Declared method a client chose when creating a Payment."""

    STRIPE = "stripe", "Stripe"


__all__ = [
    "InvoiceState",
    "PaymentMethod",
]
