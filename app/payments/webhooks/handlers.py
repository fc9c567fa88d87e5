"""
Webhook event handlers for Stripe events.

This module provides a handler registry mapping verified event types to
the service that applies them. Only ``charge.succeeded`` is handled;
every other type is acknowledged and ignored.

Usage:
    from payments.webhooks.handlers import dispatch_webhook, register_handler

    # Register a handler
    @register_handler("charge.succeeded")
    def handle_charge_succeeded(event: dict) -> ServiceResult:
        ...

    # Dispatch a verified event to its handler
    result = dispatch_webhook(event)
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from core.services import ServiceResult

from payments.services import PaymentReconciliationService

logger = logging.getLogger(__name__)


CHARGE_SUCCEEDED = "charge.succeeded"
IGNORED_EVENT_MESSAGE = f"event is not {CHARGE_SUCCEEDED}"


# =============================================================================
# Handler Registry
# =============================================================================


# Maps event type strings to handler functions
WEBHOOK_HANDLERS: dict[str, Callable[[dict[str, Any]], ServiceResult]] = {}


def register_handler(event_type: str) -> Callable:
    """
    Decorator to register a webhook event handler.

    Args:
        event_type: The Stripe event type (e.g., "charge.succeeded")

    Returns:
        Decorator function that registers the handler
    """

    def decorator(func: Callable[[dict[str, Any]], ServiceResult]) -> Callable:
        WEBHOOK_HANDLERS[event_type] = func
        logger.debug(f"Registered webhook handler for {event_type}")
        return func

    return decorator


def dispatch_webhook(event: dict[str, Any]) -> ServiceResult:
    """
    Dispatch a verified event to the handler for its type.

    Unhandled types return success with IGNORED_EVENT_MESSAGE and touch
    nothing, so Stripe stops redelivering them.

    Raises:
        PaymentError: Propagated from the handler for the view to map
    """
    event_type = event.get("type")
    handler = WEBHOOK_HANDLERS.get(event_type)

    if not handler:
        logger.info(
            f"Ignoring webhook event type: {event_type}",
            extra={"stripe_event_id": event.get("id"), "event_type": event_type},
        )
        return ServiceResult.success(None, message=IGNORED_EVENT_MESSAGE)

    logger.info(
        f"Dispatching {event_type} to handler",
        extra={"stripe_event_id": event.get("id")},
    )
    return handler(event)


# =============================================================================
# Charge Handlers
# =============================================================================


@register_handler(CHARGE_SUCCEEDED)
def handle_charge_succeeded(event: dict[str, Any]) -> ServiceResult:
    """Mark the Payment referenced by the charge metadata as paid."""
    return PaymentReconciliationService.reconcile_charge_succeeded(event)
