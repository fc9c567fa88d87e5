"""
Payment services.

This module provides:
- PaymentService: Creates Payments for invoices and initiates charges
- PaymentReconciliationService: Applies verified charge webhooks exactly once

Usage:
    from payments.services import PaymentService, PaymentReconciliationService

    payment = PaymentService.create_payment_for_invoices(client, invoices).data
    PaymentService.initiate_charge(payment)

    # From the webhook handler
    result = PaymentReconciliationService.reconcile_charge_succeeded(event)
"""

from payments.services.payment_service import PaymentService
from payments.services.reconciliation_service import (
    PaymentReconciliationService,
    ReconciliationOutcome,
)

__all__ = [
    "PaymentReconciliationService",
    "PaymentService",
    "ReconciliationOutcome",
]
