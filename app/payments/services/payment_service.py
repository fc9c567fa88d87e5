"""
Payment creation and charge initiation.

This is the outbound half of the correlation contract: every charge created
here carries the Payment's id in its metadata, which is what lets the
webhook reconciliation find the Payment again.

Usage:
    from payments.services import PaymentService

    result = PaymentService.create_payment_for_invoices(client, [invoice_a, invoice_b])
    payment = result.data

    intent = PaymentService.initiate_charge(payment).data
    # hand intent.client_secret to the frontend
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django_fsm import TransitionNotAllowed

from core.services import BaseService, ServiceResult

from payments.adapters import (
    CreatePaymentIntentParams,
    IdempotencyKeyGenerator,
    PaymentIntentResult,
    StripeAdapter,
)
from payments.exceptions import (
    InvalidStateTransitionError,
    PaymentValidationError,
)
from payments.models import Invoice, Payment
from payments.state_machines import InvoiceState

if TYPE_CHECKING:
    from collections.abc import Sequence

    from authentication.models import User


logger = logging.getLogger(__name__)


class PaymentService(BaseService):
    """
    Creates Payments for invoices and starts the provider charge for them.
    """

    @staticmethod
    def build_charge_metadata(payment: Payment) -> dict[str, str]:
        """
        Metadata attached to every charge for a Payment.

        Both keys carry the Payment id; reconciliation requires both and
        resolves by paymentId.
        """
        payment_id = str(payment.id)
        return {"paymentId": payment_id, "orderId": payment_id}

    @classmethod
    def create_payment_for_invoices(
        cls,
        user: User,
        invoices: Sequence[Invoice],
        payment_method: str | None = None,
    ) -> ServiceResult[Payment]:
        """
        Create one Payment covering the given open invoices.

        All invoices must belong to ``user`` as client and share a currency.
        The invoices are locked, linked to the new Payment and moved to
        awaiting_payment in the same transaction as the Payment insert.

        Raises:
            PaymentValidationError: Empty batch, foreign or mixed-currency
                invoices, invoices that are not open, or a zero total
            InvalidStateTransitionError: An invoice stopped being open while
                we were waiting for its lock
        """
        if not invoices:
            raise PaymentValidationError("At least one invoice is required")

        invoice_ids = [invoice.id for invoice in invoices]

        with cls.atomic():
            locked = list(
                Invoice.objects.select_for_update()
                .filter(pk__in=invoice_ids)
                .order_by("pk")
            )
            cls._validate_batch(user, invoice_ids, locked)

            total = sum((invoice.total_price for invoice in locked), Decimal("0"))
            payment = Payment.objects.create(
                user=user,
                amount=total,
                currency=locked[0].currency,
                payment_method=payment_method or settings.PAYMENT_DEFAULT_METHOD,
            )

            for invoice in locked:
                try:
                    invoice.request_payment(payment)
                except TransitionNotAllowed as e:
                    raise InvalidStateTransitionError(
                        f"Cannot request payment for invoice in '{invoice.state}' state",
                        details={
                            "invoice_id": str(invoice.id),
                            "current_state": invoice.state,
                            "transition": "request_payment",
                        },
                    ) from e
                invoice.save(update_fields=["state", "payment", "updated_at"])

        logger.info(
            "Created payment for invoices",
            extra={
                "payment_id": str(payment.id),
                "user_id": str(user.id),
                "invoice_count": len(locked),
                "amount": str(total),
                "currency": payment.currency,
            },
        )
        return ServiceResult.success(payment)

    @classmethod
    def initiate_charge(
        cls,
        payment: Payment,
        attempt: int = 1,
    ) -> ServiceResult[PaymentIntentResult]:
        """
        Create the Stripe PaymentIntent that will settle ``payment``.

        Retrying with the same attempt number reuses the idempotency key,
        so a timed-out call never produces a second charge.

        Raises:
            PaymentValidationError: Payment is already paid
            StripeError: Provider call failed (see is_retryable)
        """
        if payment.is_paid:
            raise PaymentValidationError(
                "Payment is already paid",
                details={"payment_id": str(payment.id)},
            )

        params = CreatePaymentIntentParams(
            amount_minor=payment.amount_minor,
            currency=payment.currency,
            idempotency_key=IdempotencyKeyGenerator.generate(
                operation="create_intent",
                entity_id=payment.id,
                attempt=attempt,
            ),
            metadata=cls.build_charge_metadata(payment),
            receipt_email=payment.user.email,
        )

        intent = StripeAdapter.create_payment_intent(params)

        cls.get_logger().info(
            "Charge initiated",
            extra={"payment_id": str(payment.id), "payment_intent_id": intent.id},
        )
        return ServiceResult.success(intent)

    @staticmethod
    def _validate_batch(
        user: User,
        requested_ids: list,
        locked: list[Invoice],
    ) -> None:
        if len(locked) != len(set(requested_ids)):
            missing = set(requested_ids) - {invoice.id for invoice in locked}
            raise PaymentValidationError(
                "Some invoices do not exist",
                details={"missing_invoice_ids": sorted(str(pk) for pk in missing)},
            )

        foreign = [str(inv.id) for inv in locked if inv.client_id != user.id]
        if foreign:
            raise PaymentValidationError(
                "Invoices belong to another client",
                details={"invoice_ids": foreign},
            )

        not_open = [str(inv.id) for inv in locked if inv.state != InvoiceState.OPEN]
        if not_open:
            raise PaymentValidationError(
                "Only open invoices can be paid",
                details={"invoice_ids": not_open},
            )

        currencies = {inv.currency for inv in locked}
        if len(currencies) > 1:
            raise PaymentValidationError(
                "Invoices use different currencies",
                details={"currencies": sorted(currencies)},
            )

        if sum((inv.total_price for inv in locked), Decimal("0")) <= 0:
            raise PaymentValidationError("Payment total must be positive")
