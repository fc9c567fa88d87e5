"""
Payment reconciliation for verified charge webhooks.

This module turns a verified ``charge.succeeded`` event into the PENDING →
PAID transition of the Payment it references, exactly once, together with
the Invoices that Payment settles.

Correlation:
    Charges are created with metadata ``{"paymentId": ..., "orderId": ...}``
    (see PaymentService.build_charge_metadata). Both keys must be present;
    the Payment is resolved by ``paymentId``.

Exactly-once:
    Stripe delivers at least once and may deliver concurrently. The
    transition is a conditional ``UPDATE ... WHERE is_paid = false``; only
    the delivery whose update matches a row settles invoices and schedules
    the receipt. Every other delivery is a no-op success, except that a
    redelivery for a paid Payment whose receipt was never sent queues the
    receipt task again.

Usage:
    from payments.services import PaymentReconciliationService

    result = PaymentReconciliationService.reconcile_charge_succeeded(event)
    if result.data.applied:
        ...  # this delivery performed the transition
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from typing import TYPE_CHECKING

from django.db import DatabaseError, transaction
from django.utils import timezone

from core.services import BaseService, ServiceResult

from payments.exceptions import (
    MissingCorrelationError,
    PersistenceError,
    UnknownPaymentError,
)
from payments.models import Invoice, Payment
from payments.money import format_major_units
from payments.state_machines import InvoiceState
from payments.tasks import send_payment_receipt

if TYPE_CHECKING:
    from typing import Any


logger = logging.getLogger(__name__)

# Status recorded in payment_result once a charge is applied
COMPLETED_STATUS = "COMPLETED"


@dataclass
class ReconciliationOutcome:
    """
    What reconciling one event did.

    Attributes:
        payment_id: Payment the event resolved to
        applied: True if this call performed the PENDING → PAID transition
        invoices_paid: Number of invoices moved to paid by this call
        receipt_scheduled: True if this call queued the receipt task
    """

    payment_id: str
    applied: bool
    invoices_paid: int = 0
    receipt_scheduled: bool = False


class PaymentReconciliationService(BaseService):
    """
    Applies verified provider events to Payments and Invoices.

    All methods are class methods; the service holds no state between
    calls, so concurrent webhook deliveries never share anything but the
    database.
    """

    SUCCESS_MESSAGE = "updateOrderToPaid was successful"

    @classmethod
    def reconcile_charge_succeeded(
        cls,
        event: dict[str, Any],
    ) -> ServiceResult[ReconciliationOutcome]:
        """
        Mark the Payment referenced by a verified charge as paid.

        Args:
            event: Verified ``charge.succeeded`` event dict

        Returns:
            ServiceResult.success with a ReconciliationOutcome. Already-paid
            payments and lost races are successes with applied=False.

        Raises:
            MissingCorrelationError: Charge metadata lacks orderId/paymentId
            UnknownPaymentError: paymentId resolves to no Payment
            PaymentValidationError: Charge amount is missing or invalid
            PersistenceError: The store failed; safe to redeliver
        """
        event_id = event.get("id")
        charge = cls._charge_from_event(event)
        payment_id = cls.resolve_payment_id(charge.get("metadata"), event_id=event_id)

        log_context = {
            "stripe_event_id": event_id,
            "charge_id": charge.get("id"),
            "payment_id": payment_id,
        }

        try:
            payment = Payment.objects.find_by_id(payment_id)
        except DatabaseError as e:
            logger.exception("Payment lookup failed", extra=log_context)
            raise PersistenceError(str(e), details=log_context) from e

        if payment is None:
            logger.error("Charge references unknown payment", extra=log_context)
            raise UnknownPaymentError("Payment not found", details=log_context)

        if payment.is_paid:
            logger.info(
                "Payment already paid, ignoring redelivery",
                extra=log_context,
            )
            # A receipt enqueue that failed after the transition committed
            # is retried here; the task's own claim prevents a second email.
            receipt_scheduled = not payment.receipt_email_sent
            if receipt_scheduled:
                logger.info("Receipt still pending, scheduling again", extra=log_context)
                cls._schedule_receipt(str(payment.id))
            return ServiceResult.success(
                ReconciliationOutcome(
                    payment_id=str(payment.id),
                    applied=False,
                    receipt_scheduled=receipt_scheduled,
                ),
                message=cls.SUCCESS_MESSAGE,
            )

        result = cls.build_payment_result(charge, fallback_currency=payment.currency)
        cls._warn_on_mismatch(payment, result, log_context)

        try:
            outcome = cls._apply(payment, result, log_context)
        except DatabaseError as e:
            logger.exception("Failed to persist payment", extra=log_context)
            raise PersistenceError(str(e), details=log_context) from e

        return ServiceResult.success(outcome, message=cls.SUCCESS_MESSAGE)

    # =========================================================================
    # Correlation
    # =========================================================================

    @classmethod
    def resolve_payment_id(
        cls,
        metadata: Any,
        event_id: str | None = None,
    ) -> str:
        """
        Extract the internal Payment id from charge metadata.

        Both ``orderId`` and ``paymentId`` must be present. When they
        differ, ``paymentId`` wins and the mismatch is logged for operators.

        Raises:
            MissingCorrelationError: Either key is missing or empty
        """
        metadata = metadata if isinstance(metadata, dict) else {}
        order_id = metadata.get("orderId")
        payment_id = metadata.get("paymentId")

        for key, value in (("orderId", order_id), ("paymentId", payment_id)):
            if not value:
                logger.warning(
                    f"Charge metadata has no {key}",
                    extra={"stripe_event_id": event_id, "metadata_keys": sorted(metadata)},
                )
                raise MissingCorrelationError(
                    f"No {key} found in payment metadata",
                    details={"missing_key": key, "stripe_event_id": event_id},
                )

        if str(order_id) != str(payment_id):
            logger.warning(
                "Charge metadata orderId and paymentId disagree, using paymentId",
                extra={
                    "stripe_event_id": event_id,
                    "order_id": order_id,
                    "payment_id": payment_id,
                },
            )

        return str(payment_id)

    # =========================================================================
    # Result Payload
    # =========================================================================

    @staticmethod
    def build_payment_result(
        charge: dict[str, Any],
        fallback_currency: str = "usd",
    ) -> dict[str, Any]:
        """
        Derive the fields stored in Payment.payment_result from a charge.

        Amounts are exact decimal strings in major units with the currency's
        precision (12345 usd -> "123.45", 500 jpy -> "500"). ``captured_at``
        is the charge's creation time, or the processing time when the
        charge carries none.
        """
        currency = (charge.get("currency") or fallback_currency).lower()
        amount = format_major_units(charge.get("amount"), currency)

        billing_details = charge.get("billing_details") or {}
        payer_email = billing_details.get("email") or charge.get("receipt_email")

        created = charge.get("created")
        if isinstance(created, int):
            captured_at = datetime.fromtimestamp(created, tz=dt_timezone.utc)
        else:
            captured_at = timezone.now()

        return {
            "external_id": charge.get("id"),
            "status": COMPLETED_STATUS,
            "payer_email": payer_email,
            "amount": amount,
            "price_paid": amount,
            "currency": currency,
            "captured_at": captured_at.isoformat(),
        }

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _charge_from_event(event: dict[str, Any]) -> dict[str, Any]:
        data = event.get("data")
        charge = data.get("object") if isinstance(data, dict) else None
        return charge if isinstance(charge, dict) else {}

    @staticmethod
    def _schedule_receipt(payment_id: str) -> None:
        # robust: a broker failure is logged and never fails the webhook
        transaction.on_commit(
            lambda: send_payment_receipt.delay(payment_id),
            robust=True,
        )

    @staticmethod
    def _warn_on_mismatch(
        payment: Payment,
        result: dict[str, Any],
        log_context: dict[str, Any],
    ) -> None:
        if result["currency"] != payment.currency.lower():
            logger.warning(
                "Charge currency differs from payment currency",
                extra={
                    **log_context,
                    "charged_currency": result["currency"],
                    "expected_currency": payment.currency,
                },
            )
        if Decimal(result["amount"]) != payment.amount:
            logger.warning(
                "Charge amount differs from payment amount",
                extra={
                    **log_context,
                    "charged": result["amount"],
                    "expected": str(payment.amount),
                    "currency": result["currency"],
                },
            )

    @classmethod
    def _apply(
        cls,
        payment: Payment,
        result: dict[str, Any],
        log_context: dict[str, Any],
    ) -> ReconciliationOutcome:
        """
        Transition the payment and its invoices in one transaction.

        The receipt task is scheduled on commit, so a rollback never sends
        an email for a payment that is still pending.
        """
        paid_at = timezone.now()

        with cls.atomic():
            applied = Payment.objects.mark_paid(payment.id, result, paid_at=paid_at)
            if not applied:
                logger.info(
                    "Payment was paid by a concurrent delivery",
                    extra=log_context,
                )
                return ReconciliationOutcome(payment_id=str(payment.id), applied=False)

            invoices = (
                Invoice.objects.select_for_update()
                .filter(payment_id=payment.id, state=InvoiceState.AWAITING_PAYMENT)
                .order_by("pk")
            )
            invoices_paid = 0
            for invoice in invoices:
                invoice.mark_paid(paid_at=paid_at)
                invoice.save(update_fields=["state", "paid_at", "updated_at"])
                invoices_paid += 1

            payment_id = str(payment.id)
            cls._schedule_receipt(payment_id)

        logger.info(
            "Payment marked paid",
            extra={**log_context, "invoices_paid": invoices_paid},
        )
        return ReconciliationOutcome(
            payment_id=payment_id,
            applied=True,
            invoices_paid=invoices_paid,
            receipt_scheduled=True,
        )
