"""
Payment model and its store primitives.

A Payment is a client's obligation to pay one or more Invoices. It is
created PENDING (is_paid=False) and becomes PAID exactly once, when a
verified ``charge.succeeded`` webhook is reconciled against it.

Usage:
    from payments.models import Payment

    payment = Payment.objects.find_by_id(metadata["paymentId"])
    if payment and Payment.objects.mark_paid(payment.id, result):
        ...  # this caller won the PENDING → PAID transition
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.money import to_minor_units
from payments.state_machines import PaymentMethod

if TYPE_CHECKING:
    from datetime import datetime
    from typing import Any


class PaymentQuerySet(models.QuerySet):
    """QuerySet with the two primitives the reconciliation workflow relies on."""

    def find_by_id(self, payment_id: Any) -> Payment | None:
        """
        Look up a Payment by id.

        Malformed ids (not a UUID) are treated the same as missing rows, so
        callers see a single "not found" outcome for anything a webhook
        could carry.
        """
        try:
            pk = uuid.UUID(str(payment_id))
        except (TypeError, ValueError, AttributeError):
            return None
        return self.filter(pk=pk).first()

    def mark_paid(
        self,
        payment_id: Any,
        result: dict[str, Any],
        paid_at: datetime | None = None,
    ) -> bool:
        """
        Apply the PENDING → PAID transition if and only if it has not happened.

        Runs a single conditional ``UPDATE ... WHERE is_paid = false``. When
        two deliveries race, the database serializes the updates and only
        one of them matches a row.

        Returns:
            True if this call performed the transition, False if the Payment
            was already paid (or does not exist)
        """
        now = timezone.now()
        updated = self.filter(pk=payment_id, is_paid=False).update(
            is_paid=True,
            paid_at=paid_at or now,
            payment_result=result,
            updated_at=now,
        )
        return updated == 1

    def pending(self):
        return self.filter(is_paid=False)

    def paid(self):
        return self.filter(is_paid=True)


PaymentManager = models.Manager.from_queryset(PaymentQuerySet)


class Payment(UUIDPrimaryKeyMixin, BaseModel):
    """
    A client's payment covering one or more Invoices.

    State Flow:
        PENDING (is_paid=False) → PAID (is_paid=True, paid_at set)

    PAID is terminal. The transition is only ever applied through
    ``Payment.objects.mark_paid``; ``save()`` is never used to flip is_paid.

    Fields:
        user: Client who owes the payment
        amount: Amount owed in major currency units
        currency: ISO 4217 currency code (lowercase)
        payment_method: Method the client declared (e.g. stripe)
        payment_result: Provider-derived fields recorded when paid
        is_paid / paid_at: Settlement flag and time
        receipt_email_sent / receipt_email_sent_at: Receipt side-effect guard

    Relationships:
        invoices: Invoices this Payment settles
    """

    # ==========================================================================
    # Ownership & Amount
    # ==========================================================================

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments",
        help_text="Client who owes this payment",
    )

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Amount owed in major currency units",
    )

    currency = models.CharField(
        max_length=3,
        default="usd",
        help_text="ISO 4217 currency code (lowercase)",
    )

    payment_method = models.CharField(
        max_length=32,
        choices=PaymentMethod.choices,
        default=PaymentMethod.STRIPE,
        help_text="Payment method declared by the client",
    )

    # ==========================================================================
    # Settlement
    # ==========================================================================

    payment_result = models.JSONField(
        default=dict,
        blank=True,
        help_text="Fields derived from the provider event when the payment was captured",
    )

    is_paid = models.BooleanField(
        default=False,
        help_text="Whether the payment has been captured",
    )

    paid_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the payment was captured",
    )

    # ==========================================================================
    # Receipt Side Effect
    # ==========================================================================

    receipt_email_sent = models.BooleanField(
        default=False,
        help_text="Whether the receipt email has been claimed for sending",
    )

    receipt_email_sent_at = models.DateTimeField(
        null=True,
        blank=True,
    )

    objects = PaymentManager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_paid"], name="pay_payment_user_paid_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="pay_payment_amount_positive",
            ),
            models.CheckConstraint(
                condition=(
                    Q(is_paid=True, paid_at__isnull=False)
                    | Q(is_paid=False, paid_at__isnull=True)
                ),
                name="pay_payment_paid_at_iff_paid",
            ),
            models.CheckConstraint(
                condition=Q(receipt_email_sent=False) | Q(is_paid=True),
                name="pay_payment_receipt_only_when_paid",
            ),
        ]

    def __str__(self) -> str:
        status = "paid" if self.is_paid else "pending"
        return f"Payment({self.id}, {status}, {self.amount} {self.currency.upper()})"

    @property
    def amount_minor(self) -> int:
        """Amount in the currency's smallest unit, as the provider expects it."""
        return to_minor_units(self.amount, self.currency)

    @property
    def payer_email(self) -> str | None:
        """Email the provider reported for the payer, if the payment is paid."""
        return (self.payment_result or {}).get("payer_email")
