"""
Payments app for Stripe integration.

This app handles:
- Payments covering one or more contractor invoices
- Charge initiation with paymentId/orderId metadata
- charge.succeeded webhook reconciliation (exactly-once PENDING → PAID)
- Receipt email after a payment is captured

Related apps:
    - authentication: User model for payers and contractors
    - marketplace: Tasks billed on invoices
    - toolkit: EmailService for receipts

Usage:
    from payments.services import PaymentService

    payment = PaymentService.create_payment_for_invoices(client, invoices).data
    intent = PaymentService.initiate_charge(payment).data
"""
