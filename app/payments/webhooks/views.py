"""
Webhook endpoint views for Stripe.

This module provides the HTTP endpoint for receiving payment webhooks.
The view:
1. Rejects requests without a Stripe-Signature header
2. Verifies the signature against the raw body
3. Dispatches the verified event to its handler
4. Maps the outcome to a JSON response

Processing is synchronous: a 200 means the Payment is already settled,
and any 5xx makes Stripe redeliver the event later.

Usage:
    # In urls.py
    from payments.webhooks.views import payment_webhook

    urlpatterns = [
        path("webhooks/payment", payment_webhook, name="payment_webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.adapters import StripeAdapter
from payments.exceptions import PaymentError, PersistenceError
from payments.webhooks.handlers import dispatch_webhook

logger = logging.getLogger(__name__)

PROCESSING_FAILED_MESSAGE = "Failed to process payment webhook"


@csrf_exempt
@require_POST
def payment_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive and apply a Stripe webhook event.

    Returns:
        JsonResponse with status:
        - 200: Event applied, already applied, or ignored
        - 400: Missing/invalid signature or missing correlation metadata
        - 404: Charge references an unknown payment
        - 500: Unexpected or persistence failure (Stripe will retry)

    Example Stripe-Signature header:
        t=1614556800,v1=xxx,v0=yyy
    """
    signature = request.headers.get("Stripe-Signature")

    if not signature:
        logger.warning("Webhook received without Stripe-Signature header")
        return JsonResponse({"error": "No signature header"}, status=400)

    try:
        event = StripeAdapter.verify_webhook_signature(request.body, signature)

        logger.info(
            f"Received Stripe webhook: {event.get('type')}",
            extra={"stripe_event_id": event.get("id"), "event_type": event.get("type")},
        )

        result = dispatch_webhook(event)

    except PersistenceError as e:
        return JsonResponse(
            {"error": PROCESSING_FAILED_MESSAGE, "message": e.message},
            status=e.http_status,
        )
    except PaymentError as e:
        logger.warning(
            "Webhook rejected",
            extra={"error_code": e.error_code, "error": e.message},
        )
        return JsonResponse({"error": e.message}, status=e.http_status)
    except Exception as e:
        logger.exception("Unexpected error processing payment webhook")
        return JsonResponse(
            {"error": PROCESSING_FAILED_MESSAGE, "message": str(e)},
            status=500,
        )

    return JsonResponse(result.to_response(), status=200)
