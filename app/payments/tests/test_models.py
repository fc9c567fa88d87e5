"""
Tests for payment domain models.

Covers the Payment store primitives (find_by_id, mark_paid), the database
constraints on Payment and Invoice, and InvoiceItem helpers.
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone

from payments.models import Invoice, Payment
from payments.state_machines import InvoiceState, PaymentMethod
from payments.tests.factories import (
    InvoiceFactory,
    InvoiceItemFactory,
    PaymentFactory,
)


RESULT = {
    "external_id": "ch_123",
    "status": "COMPLETED",
    "payer_email": "payer@example.com",
    "amount": "123.45",
    "price_paid": "123.45",
    "currency": "usd",
}


# =============================================================================
# Payment Tests
# =============================================================================


class TestPaymentModel:
    """Tests for Payment defaults and derived properties."""

    def test_defaults_to_pending(self, db, pending_payment):
        assert pending_payment.is_paid is False
        assert pending_payment.paid_at is None
        assert pending_payment.payment_result == {}
        assert pending_payment.receipt_email_sent is False
        assert pending_payment.payment_method == PaymentMethod.STRIPE

    def test_amount_minor(self, db):
        assert PaymentFactory(amount=Decimal("123.45")).amount_minor == 12345
        assert PaymentFactory(amount=Decimal("500"), currency="jpy").amount_minor == 500

    def test_payer_email_comes_from_result(self, db, pending_payment, paid_payment):
        assert pending_payment.payer_email is None
        assert paid_payment.payer_email == "payer@example.com"

    def test_str(self, db, pending_payment):
        assert "pending" in str(pending_payment)
        assert "USD" in str(pending_payment)


class TestPaymentFindById:
    """Tests for Payment.objects.find_by_id."""

    def test_finds_existing_payment(self, db, pending_payment):
        assert Payment.objects.find_by_id(str(pending_payment.id)) == pending_payment

    def test_accepts_uuid_instance(self, db, pending_payment):
        assert Payment.objects.find_by_id(pending_payment.id) == pending_payment

    def test_unknown_id_returns_none(self, db):
        assert Payment.objects.find_by_id(str(uuid.uuid4())) is None

    @pytest.mark.parametrize("bad_id", ["not-a-uuid", "", None, 42, {"id": 1}])
    def test_malformed_id_returns_none(self, db, bad_id):
        assert Payment.objects.find_by_id(bad_id) is None


class TestPaymentMarkPaid:
    """Tests for the conditional PENDING → PAID update."""

    def test_first_call_applies_transition(self, db, pending_payment):
        paid_at = timezone.now() - timedelta(minutes=1)

        applied = Payment.objects.mark_paid(pending_payment.id, RESULT, paid_at=paid_at)

        payment = Payment.objects.get(pk=pending_payment.pk)
        assert applied is True
        assert payment.is_paid is True
        assert payment.paid_at == paid_at
        assert payment.payment_result == RESULT

    def test_second_call_is_a_no_op(self, db, pending_payment):
        first_paid_at = timezone.now() - timedelta(hours=1)
        Payment.objects.mark_paid(pending_payment.id, RESULT, paid_at=first_paid_at)

        applied = Payment.objects.mark_paid(
            pending_payment.id,
            {**RESULT, "external_id": "ch_other"},
        )

        payment = Payment.objects.get(pk=pending_payment.pk)
        assert applied is False
        assert payment.paid_at == first_paid_at
        assert payment.payment_result["external_id"] == "ch_123"

    def test_missing_payment_returns_false(self, db):
        assert Payment.objects.mark_paid(uuid.uuid4(), RESULT) is False

    def test_defaults_paid_at_to_now(self, db, pending_payment):
        before = timezone.now()

        Payment.objects.mark_paid(pending_payment.id, RESULT)

        assert Payment.objects.get(pk=pending_payment.pk).paid_at >= before

    def test_pending_and_paid_querysets(self, db, pending_payment, paid_payment):
        assert list(Payment.objects.pending()) == [pending_payment]
        assert list(Payment.objects.paid()) == [paid_payment]


class TestPaymentConstraints:
    """Database constraints keep payment rows consistent."""

    def test_amount_must_be_positive(self, db, client_user):
        with pytest.raises(IntegrityError), transaction.atomic():
            Payment.objects.create(user=client_user, amount=Decimal("0"))

    def test_paid_requires_paid_at(self, db, client_user):
        with pytest.raises(IntegrityError), transaction.atomic():
            Payment.objects.create(
                user=client_user,
                amount=Decimal("10.00"),
                is_paid=True,
                paid_at=None,
            )

    def test_pending_cannot_have_paid_at(self, db, client_user):
        with pytest.raises(IntegrityError), transaction.atomic():
            Payment.objects.create(
                user=client_user,
                amount=Decimal("10.00"),
                paid_at=timezone.now(),
            )

    def test_receipt_only_for_paid_payments(self, db, client_user):
        with pytest.raises(IntegrityError), transaction.atomic():
            Payment.objects.create(
                user=client_user,
                amount=Decimal("10.00"),
                receipt_email_sent=True,
            )


# =============================================================================
# Invoice Tests
# =============================================================================


class TestInvoiceModel:
    """Tests for Invoice defaults and helpers."""

    def test_defaults_to_open_without_payment(self, db, open_invoice):
        assert open_invoice.state == InvoiceState.OPEN
        assert open_invoice.payment is None
        assert open_invoice.paid_at is None

    def test_items_total(self, db, client_user):
        invoice = InvoiceFactory(client=client_user, total_price=Decimal("150.00"))
        InvoiceItemFactory(invoice=invoice, price=Decimal("100.00"))
        InvoiceItemFactory(invoice=invoice, price=Decimal("50.00"))

        assert invoice.items_total() == Decimal("150.00")

    def test_items_total_without_items(self, db, client_user):
        assert InvoiceFactory(client=client_user).items_total() == Decimal("0")

    def test_invoices_reverse_relation(self, db, awaiting_invoice, pending_payment):
        assert list(pending_payment.invoices.all()) == [awaiting_invoice]


class TestInvoiceConstraints:
    """Database constraints on invoices and their items."""

    def test_awaiting_payment_requires_payment(self, db, client_user, contractor):
        with pytest.raises(IntegrityError), transaction.atomic():
            Invoice.objects.create(
                client=client_user,
                contractor=contractor,
                total_price=Decimal("10.00"),
                state=InvoiceState.AWAITING_PAYMENT,
            )

    def test_paid_requires_paid_at(self, db, pending_payment, contractor):
        with pytest.raises(IntegrityError), transaction.atomic():
            Invoice.objects.create(
                client=pending_payment.user,
                contractor=contractor,
                total_price=Decimal("10.00"),
                payment=pending_payment,
                state=InvoiceState.PAID,
            )

    def test_total_cannot_be_negative(self, db, client_user, contractor):
        with pytest.raises(IntegrityError), transaction.atomic():
            Invoice.objects.create(
                client=client_user,
                contractor=contractor,
                total_price=Decimal("-1.00"),
            )

    def test_task_billed_once_per_invoice(self, db, open_invoice):
        item = open_invoice.items.get()

        with pytest.raises(IntegrityError), transaction.atomic():
            InvoiceItemFactory(invoice=open_invoice, task=item.task)
