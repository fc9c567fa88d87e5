"""
Celery tasks for payment side effects.

This module provides async tasks for:
- Sending the payment receipt email once a Payment becomes paid

The receipt task is only ever scheduled by the delivery that wins the
PENDING → PAID transition (see PaymentReconciliationService), and it
claims the receipt with a conditional update before sending, so a
redelivered task never emails the payer twice.

Usage:
    from payments.tasks import send_payment_receipt

    transaction.on_commit(lambda: send_payment_receipt.delay(str(payment.id)))
"""

from __future__ import annotations

import logging
from smtplib import SMTPException

from celery import shared_task
from django.db import transaction
from django.utils import timezone

from payments.models import Payment
from payments.money import format_major_units
from toolkit.services import EmailService

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

MAX_RECEIPT_RETRIES = 5
RECEIPT_TEMPLATE = "payments/emails/payment_receipt"


# =============================================================================
# Receipt Tasks
# =============================================================================


@shared_task(
    bind=True,
    autoretry_for=(SMTPException, ConnectionError),
    retry_backoff=True,
    retry_backoff_max=300,
    retry_kwargs={"max_retries": MAX_RECEIPT_RETRIES},
    acks_late=True,
)
def send_payment_receipt(self, payment_id: str) -> dict:
    """
    Email the payer a receipt for a paid Payment.

    The receipt_email_sent flag is flipped and the email sent inside one
    transaction. If sending raises, the flag rolls back and Celery retries.

    Args:
        payment_id: UUID of the paid Payment

    Returns:
        Dict with the task outcome status
    """
    logger.info("Sending payment receipt", extra={"payment_id": payment_id})

    with transaction.atomic():
        now = timezone.now()
        claimed = Payment.objects.filter(
            pk=payment_id,
            is_paid=True,
            receipt_email_sent=False,
        ).update(
            receipt_email_sent=True,
            receipt_email_sent_at=now,
            updated_at=now,
        )

        if not claimed:
            logger.info(
                "Receipt not sent, payment missing, unpaid or already receipted",
                extra={"payment_id": payment_id},
            )
            return {"status": "skipped", "payment_id": payment_id}

        payment = Payment.objects.select_related("user").get(pk=payment_id)
        recipient = payment.payer_email or payment.user.email

        EmailService.send(
            to=recipient,
            subject="Your payment receipt",
            template_name=RECEIPT_TEMPLATE,
            context={
                "name": payment.user.get_short_name(),
                "payment_id": str(payment.id),
                "amount": format_major_units(payment.amount_minor, payment.currency),
                "currency": payment.currency.upper(),
                "paid_at": payment.paid_at,
                "invoices": list(payment.invoices.order_by("created_at")),
            },
        )

    logger.info(
        "Payment receipt sent",
        extra={"payment_id": payment_id, "recipient": recipient},
    )
    return {"status": "sent", "payment_id": payment_id, "recipient": recipient}
