"""
URL configuration for the payments app.

Routes:
    - POST /webhooks/payment/ - Stripe webhook endpoint

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
The same view is also mounted at /webhooks/payment in config/urls.py.
"""

from django.urls import path

from payments.webhooks.views import payment_webhook

app_name = "payments"

urlpatterns = [
    path("webhooks/payment/", payment_webhook, name="webhook_payment"),
]
