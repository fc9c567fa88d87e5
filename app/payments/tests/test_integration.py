"""
End-to-end tests for the payment flow.

A client pays two invoices: the Payment is created, the charge is
initiated with correlation metadata, Stripe's webhook arrives (twice),
and exactly one receipt goes out.
"""

import json
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.core import mail

from payments.adapters import PaymentIntentResult
from payments.models import Invoice, Payment
from payments.services import PaymentService
from payments.state_machines import InvoiceState
from payments.tasks import send_payment_receipt
from payments.tests.factories import InvoiceFactory, InvoiceItemFactory, build_charge_event


@pytest.fixture
def invoices(client_user, contractor):
    first = InvoiceFactory(
        client=client_user, contractor=contractor, total_price=Decimal("100.00")
    )
    second = InvoiceFactory(
        client=client_user, contractor=contractor, total_price=Decimal("23.45")
    )
    InvoiceItemFactory(invoice=first)
    InvoiceItemFactory(invoice=second)
    return [first, second]


def _run_receipts(mock_delay):
    """Run queued receipt tasks in-process."""
    for call in mock_delay.call_args_list:
        send_payment_receipt(*call.args)


class TestPaymentFlow:
    def test_invoices_paid_and_receipt_sent_once(
        self, client_user, invoices, post_webhook, django_capture_on_commit_callbacks
    ):
        payment = PaymentService.create_payment_for_invoices(client_user, invoices).data

        with patch(
            "payments.services.payment_service.StripeAdapter.create_payment_intent",
            return_value=PaymentIntentResult(
                id="pi_e2e",
                status="requires_payment_method",
                amount_minor=12345,
                currency="usd",
                client_secret="pi_e2e_secret",
            ),
        ) as create_intent:
            PaymentService.initiate_charge(payment)

        metadata = create_intent.call_args.args[0].metadata
        event = build_charge_event(
            metadata=metadata,
            amount=12345,
            currency="usd",
            payer_email="casey@example.com",
        )
        body = json.dumps(event)

        with patch(
            "payments.services.reconciliation_service.send_payment_receipt.delay"
        ) as mock_delay:
            with django_capture_on_commit_callbacks(execute=True):
                first = post_webhook(body)
            _run_receipts(mock_delay)
            with django_capture_on_commit_callbacks(execute=True):
                second = post_webhook(body)

        assert first.status_code == second.status_code == 200
        assert mock_delay.call_count == 1

        payment = Payment.objects.get(pk=payment.pk)
        assert payment.is_paid is True
        assert payment.payment_result["amount"] == "123.45"
        assert payment.payment_result["payer_email"] == "casey@example.com"
        assert payment.receipt_email_sent is True

        for invoice in invoices:
            refreshed = Invoice.objects.get(pk=invoice.pk)
            assert refreshed.state == InvoiceState.PAID
            assert refreshed.paid_at == payment.paid_at

        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ["casey@example.com"]
        assert "123.45 USD" in mail.outbox[0].body

    def test_receipt_survives_broker_outage(
        self, client_user, invoices, post_webhook, django_capture_on_commit_callbacks
    ):
        payment = PaymentService.create_payment_for_invoices(client_user, invoices).data
        body = json.dumps(build_charge_event(payment, payer_email="casey@example.com"))

        with patch(
            "payments.services.reconciliation_service.send_payment_receipt.delay",
            side_effect=[ConnectionError("broker down"), None],
        ) as mock_delay:
            with django_capture_on_commit_callbacks(execute=True):
                first = post_webhook(body)
            assert mail.outbox == []

            with django_capture_on_commit_callbacks(execute=True):
                second = post_webhook(body)

        assert first.status_code == second.status_code == 200
        assert mock_delay.call_count == 2

        # Both enqueue attempts run; the task's claim lets only one send
        _run_receipts(mock_delay)

        assert len(mail.outbox) == 1
        assert Payment.objects.get(pk=payment.pk).receipt_email_sent is True

    def test_rejected_webhook_leaves_flow_pending(self, client_user, invoices, post_webhook):
        payment = PaymentService.create_payment_for_invoices(client_user, invoices).data
        event = build_charge_event(metadata={"paymentId": str(payment.id)})

        response = post_webhook(event)

        assert response.status_code == 400
        assert Payment.objects.get(pk=payment.pk).is_paid is False
        for invoice in invoices:
            assert Invoice.objects.get(pk=invoice.pk).state == (
                InvoiceState.AWAITING_PAYMENT
            )
        assert mail.outbox == []
