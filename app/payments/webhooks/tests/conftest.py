"""
Pytest fixtures for webhook tests.

Shared payment fixtures live in payments/conftest.py; these add the
events the handler and view tests post.
"""

from unittest.mock import patch

import pytest

from payments.tests.factories import build_charge_event


@pytest.fixture
def charge_event(pending_payment):
    """charge.succeeded event correlated with pending_payment."""
    return build_charge_event(pending_payment)


@pytest.fixture
def ignored_event(pending_payment):
    """Event of a type the endpoint acknowledges without processing."""
    return build_charge_event(pending_payment, event_type="payment_intent.created")


@pytest.fixture
def mock_receipt_delay():
    """Keep receipt tasks off the broker."""
    with patch("payments.services.reconciliation_service.send_payment_receipt.delay") as mock:
        yield mock
