"""
Invoice and InvoiceItem models.

A contractor bills a client with an Invoice made of InvoiceItems, one per
task. The client settles one or more Invoices with a single Payment.

Usage:
    from payments.models import Invoice

    invoice.request_payment(payment)  # open -> awaiting_payment
    invoice.save()

    # Later, when the payment is captured
    invoice.mark_paid()  # awaiting_payment -> paid
    invoice.save()
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q, Sum
from django.utils import timezone

from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.exceptions import InvoiceAlreadySettledError
from payments.state_machines import InvoiceState


class Invoice(UUIDPrimaryKeyMixin, BaseModel):
    """
    A contractor's bill to a client.

    State Flow:
        OPEN -> AWAITING_PAYMENT -> PAID
        OPEN/AWAITING_PAYMENT -> CANCELLED

    The payment reference is write-once: once an Invoice points at a
    Payment, any attempt to point it elsewhere raises
    InvoiceAlreadySettledError.

    Fields:
        contractor: User who issued the invoice
        client: User who owes it
        total_price: Sum billed, in major currency units
        currency: ISO 4217 currency code (lowercase)
        payment: Payment settling this invoice (set once)
        state: Current FSM state
        paid_at: When the settling payment was captured
    """

    contractor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="issued_invoices",
    )

    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="received_invoices",
    )

    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Total billed in major currency units",
    )

    currency = models.CharField(
        max_length=3,
        default="usd",
        help_text="ISO 4217 currency code (lowercase)",
    )

    payment = models.ForeignKey(
        "payments.Payment",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoices",
        help_text="Payment settling this invoice (immutable once set)",
    )

    state = FSMField(
        default=InvoiceState.OPEN,
        choices=InvoiceState.choices,
        protected=True,  # Prevent direct assignment outside transitions
        help_text="Current state of the invoice (managed by FSM)",
    )

    paid_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the settling payment was captured",
    )

    # Payment id as loaded from the database; None for unsaved instances
    _loaded_payment_id = None

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["client", "state"], name="pay_invoice_client_state_idx"),
            models.Index(
                fields=["contractor", "state"], name="pay_invoice_contr_state_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(total_price__gte=0),
                name="pay_invoice_total_non_negative",
            ),
            models.CheckConstraint(
                condition=(
                    Q(state__in=[InvoiceState.OPEN, InvoiceState.CANCELLED])
                    | Q(payment__isnull=False)
                ),
                name="pay_invoice_payment_when_billed",
            ),
            models.CheckConstraint(
                condition=(
                    Q(state=InvoiceState.PAID, paid_at__isnull=False)
                    | (~Q(state=InvoiceState.PAID) & Q(paid_at__isnull=True))
                ),
                name="pay_invoice_paid_at_iff_paid",
            ),
        ]

    def __str__(self) -> str:
        return f"Invoice({self.id}, {self.state}, {self.total_price} {self.currency.upper()})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_payment_id = instance.__dict__.get("payment_id")
        return instance

    def save(self, *args, **kwargs):
        """Save, refusing to change an already-set payment reference."""
        self._check_payment_unchanged()
        super().save(*args, **kwargs)
        self._loaded_payment_id = self.payment_id

    def _check_payment_unchanged(self) -> None:
        if (
            self._loaded_payment_id is not None
            and self.payment_id != self._loaded_payment_id
        ):
            raise InvoiceAlreadySettledError(
                f"Invoice {self.id} is already linked to payment {self._loaded_payment_id}",
                details={
                    "invoice_id": str(self.id),
                    "payment_id": str(self._loaded_payment_id),
                    "attempted_payment_id": str(self.payment_id),
                },
            )

    def items_total(self) -> Decimal:
        """Sum of the invoice's item prices."""
        total = self.items.aggregate(total=Sum("price"))["total"]
        return total or Decimal("0")

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=state,
        source=InvoiceState.OPEN,
        target=InvoiceState.AWAITING_PAYMENT,
    )
    def request_payment(self, payment):
        """
        Link the invoice to the Payment that will settle it.

        Transition: OPEN -> AWAITING_PAYMENT

        Raises:
            InvoiceAlreadySettledError: If a different payment is already linked
        """
        if self.payment_id is not None and self.payment_id != payment.id:
            raise InvoiceAlreadySettledError(
                f"Invoice {self.id} is already linked to payment {self.payment_id}",
                details={
                    "invoice_id": str(self.id),
                    "payment_id": str(self.payment_id),
                    "attempted_payment_id": str(payment.id),
                },
            )
        self.payment = payment

    @transition(
        field=state,
        source=InvoiceState.AWAITING_PAYMENT,
        target=InvoiceState.PAID,
    )
    def mark_paid(self, paid_at=None):
        """
        Record that the linked Payment was captured.

        Transition: AWAITING_PAYMENT -> PAID
        """
        self.paid_at = paid_at or timezone.now()

    @transition(
        field=state,
        source=[InvoiceState.OPEN, InvoiceState.AWAITING_PAYMENT],
        target=InvoiceState.CANCELLED,
    )
    def cancel(self):
        """
        Withdraw the invoice.

        Transition: OPEN/AWAITING_PAYMENT -> CANCELLED
        """


class InvoiceItem(UUIDPrimaryKeyMixin, BaseModel):
    """
    One billed task on an Invoice.

    A task appears at most once per invoice.
    """

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name="items",
    )
    task = models.ForeignKey(
        "marketplace.Task",
        on_delete=models.PROTECT,
        related_name="invoice_items",
    )
    task_assignment = models.ForeignKey(
        "marketplace.TaskAssignment",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoice_items",
    )
    description = models.CharField(max_length=255, blank=True, default="")
    price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["invoice", "task"],
                name="pay_unique_invoice_task",
            ),
            models.CheckConstraint(
                condition=Q(price__gte=0),
                name="pay_invoice_item_price_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.task} @ {self.price}"
