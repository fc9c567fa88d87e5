"""
Webhook handling for payment events from Stripe.

Webhooks are verified against the raw body, dispatched by event type and
applied synchronously.

Usage:
    # In urls.py
    from payments.webhooks.views import payment_webhook

    urlpatterns = [
        path("webhooks/payment", payment_webhook, name="payment_webhook"),
    ]
"""

from payments.webhooks.handlers import dispatch_webhook, register_handler
from payments.webhooks.views import payment_webhook

__all__ = [
    "dispatch_webhook",
    "payment_webhook",
    "register_handler",
]
