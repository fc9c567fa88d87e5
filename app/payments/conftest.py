"""
Pytest fixtures shared by all payment test packages.

Fixtures provide payments and invoices in the states the reconciliation
workflow cares about, plus a helper that posts signed webhook requests.

Usage:
    def test_charge_marks_payment_paid(pending_payment, post_webhook):
        response = post_webhook(build_charge_event(pending_payment))
        assert response.status_code == 200
"""

import json

import pytest
from django.test import Client

from authentication.tests.factories import UserFactory
from payments.tests.factories import (
    InvoiceFactory,
    InvoiceItemFactory,
    PaymentFactory,
    sign_payload,
)


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def client_user(db):
    """A marketplace client who pays invoices."""
    return UserFactory(email="client@example.com", name="Casey Client")


@pytest.fixture
def contractor(db):
    """A contractor who issues invoices."""
    return UserFactory(email="contractor@example.com", name="Riley Contractor")


# =============================================================================
# Payment & Invoice Fixtures
# =============================================================================


@pytest.fixture
def pending_payment(db, client_user):
    """Pending payment for 123.45 usd."""
    return PaymentFactory(user=client_user)


@pytest.fixture
def paid_payment(db, client_user):
    """Payment that has already been captured."""
    return PaymentFactory(user=client_user, paid=True)


@pytest.fixture
def open_invoice(db, client_user, contractor):
    """Open invoice with one billed task."""
    invoice = InvoiceFactory(client=client_user, contractor=contractor)
    InvoiceItemFactory(invoice=invoice)
    return invoice


@pytest.fixture
def awaiting_invoice(db, pending_payment, contractor):
    """Invoice linked to pending_payment and waiting for the charge."""
    return InvoiceFactory(
        client=pending_payment.user,
        contractor=contractor,
        total_price=pending_payment.amount,
        awaiting_payment=True,
        payment=pending_payment,
    )


# =============================================================================
# Webhook Request Fixtures
# =============================================================================


@pytest.fixture
def post_webhook(db):
    """
    POST a signed event to the webhook endpoint.

    Pass ``signature=None`` to omit the header or a string to override it.
    """
    http = Client()
    unset = object()

    def _post(event, signature=unset, path="/webhooks/payment"):
        body = event if isinstance(event, str) else json.dumps(event)
        headers = {}
        if signature is unset:
            headers["HTTP_STRIPE_SIGNATURE"] = sign_payload(body)
        elif signature is not None:
            headers["HTTP_STRIPE_SIGNATURE"] = signature
        return http.post(path, data=body, content_type="application/json", **headers)

    return _post
