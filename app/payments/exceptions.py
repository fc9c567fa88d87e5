"""
Payment-specific exceptions.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── SignatureVerificationError - Webhook signature/payload rejected (400)
    ├── MissingCorrelationError - Charge metadata lacks paymentId/orderId (400)
    ├── PaymentNotFoundError - Payment entity lookup failures
    │   └── UnknownPaymentError - Webhook references no known Payment (404)
    ├── PersistenceError - Store failure while reconciling (500, transient)
    ├── PaymentValidationError - Bad input when creating payments
    ├── InvoiceAlreadySettledError - Invoice payment link is immutable
    └── PaymentProcessingError - Payment provider call failures
        └── StripeError - Base for all Stripe errors
            ├── StripeCardDeclinedError - Card declined (permanent)
            ├── StripeInsufficientFundsError - Insufficient funds (permanent)
            ├── StripeInvalidRequestError - Invalid request params (permanent)
            ├── StripeRateLimitError - Rate limited (transient, retry)
            └── StripeAPIUnavailableError - API unavailable (transient, retry)

    InvalidStateTransitionError - FSM transition not allowed (inherits ConflictError)

Every webhook-facing error carries the HTTP status the endpoint answers
with in ``http_status``; permanent errors are 4xx so Stripe stops
redelivering, transient ones are 5xx so it retries.

Usage:
    from payments.exceptions import MissingCorrelationError

    if not metadata.get("orderId"):
        raise MissingCorrelationError(
            "No orderId found in payment metadata",
            details={"missing_key": "orderId"},
        )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ConflictError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """
    Base exception for all payment operations.

    Example:
        try:
            PaymentReconciliationService.reconcile_charge_succeeded(event)
        except PaymentError as e:
            return JsonResponse({"error": e.message}, status=e.http_status)
    """

    default_error_code: str = "PAYMENT_ERROR"
    http_status: int = 400


class SignatureVerificationError(PaymentError):
    """
    Raised when a webhook cannot be authenticated.

    Covers a signature that does not match the signing secret, a stale
    timestamp, and a body that is not a valid event payload. Permanent:
    redelivering the same bytes can never succeed.
    """

    default_error_code: str = "INVALID_SIGNATURE"
    http_status: int = 400


class MissingCorrelationError(PaymentError):
    """
    Raised when a verified charge carries no internal payment reference.

    The charge metadata must contain both ``orderId`` and ``paymentId``.
    A charge without them cannot be attributed to any Payment and needs
    operator attention, so this is logged at WARNING.
    """

    default_error_code: str = "MISSING_CORRELATION"
    http_status: int = 400


class PaymentNotFoundError(PaymentError):
    """
    Raised when a payment entity cannot be found.

    Example:
        payment = Payment.objects.find_by_id(payment_id)
        if payment is None:
            raise PaymentNotFoundError(
                f"Payment {payment_id} not found",
                details={"payment_id": str(payment_id)},
            )
    """

    default_error_code: str = "PAYMENT_NOT_FOUND"
    http_status: int = 404


class UnknownPaymentError(PaymentNotFoundError):
    """
    Raised when a webhook's paymentId resolves to no Payment.

    Either the id is malformed or the row does not exist (e.g. the charge
    was created against another environment). Permanent.
    """

    default_error_code: str = "UNKNOWN_PAYMENT"


class PersistenceError(PaymentError):
    """
    Raised when the store fails while applying a verified event.

    Transient: the webhook answers 500 so the provider redelivers, and the
    conditional update makes the redelivery safe.
    """

    default_error_code: str = "PERSISTENCE_ERROR"
    http_status: int = 500


class PaymentValidationError(PaymentError):
    """
    Raised when payment creation input is invalid.

    Use for:
    - Empty invoice batches
    - Invoices that are not open
    - Mixed currencies or clients in one batch
    - Non-positive totals
    """

    default_error_code: str = "PAYMENT_VALIDATION_ERROR"


class InvoiceAlreadySettledError(PaymentError):
    """
    Raised when code tries to re-point an Invoice at a different Payment.

    Once an Invoice references a Payment the link never changes.
    """

    default_error_code: str = "INVOICE_ALREADY_SETTLED"
    http_status: int = 409


class PaymentProcessingError(PaymentError):
    """
    Raised when a call to the payment provider fails.
    """

    default_error_code: str = "PAYMENT_PROCESSING_ERROR"
    http_status: int = 502


# =============================================================================
# Stripe-Specific Exceptions
# =============================================================================


class StripeError(PaymentProcessingError):
    """
    Base exception for all Stripe-related errors.

    Attributes:
        stripe_code: Stripe's internal error code
        decline_code: Card decline code (if applicable)
        is_retryable: Whether the operation can be retried

    Example:
        try:
            StripeAdapter.create_payment_intent(params)
        except StripeError as e:
            if e.is_retryable:
                raise self.retry(exc=e)
            raise
    """

    default_error_code: str = "STRIPE_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        stripe_code: str | None = None,
        decline_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if stripe_code:
            details["stripe_code"] = stripe_code
        if decline_code:
            details["decline_code"] = decline_code
        super().__init__(message, error_code=error_code, details=details)
        self.stripe_code = stripe_code
        self.decline_code = decline_code


class StripeCardDeclinedError(StripeError):
    """
    Card was declined by the issuing bank.

    Permanent for this card; decline_code carries the bank's reason.
    """

    default_error_code: str = "CARD_DECLINED"
    is_retryable: bool = False


class StripeInsufficientFundsError(StripeError):
    """
    Insufficient funds on the payment method.

    Permanent until the client adds funds or uses another card.
    """

    default_error_code: str = "INSUFFICIENT_FUNDS"
    is_retryable: bool = False


class StripeInvalidRequestError(StripeError):
    """
    Invalid request parameters sent to Stripe.

    Usually a bug on our side (bad amount, unknown currency, invalid key).
    Log for developer investigation; never retry.
    """

    default_error_code: str = "INVALID_STRIPE_REQUEST"
    is_retryable: bool = False


class StripeRateLimitError(StripeError):
    """
    Rate limited by Stripe API. Retry with exponential backoff.
    """

    default_error_code: str = "STRIPE_RATE_LIMITED"
    is_retryable: bool = True


class StripeAPIUnavailableError(StripeError):
    """
    Stripe API is temporarily unavailable.

    Covers network failures, timeouts and Stripe 5xx responses. The call
    may have succeeded on Stripe's side, so retries must reuse the same
    idempotency key.
    """

    default_error_code: str = "STRIPE_UNAVAILABLE"
    is_retryable: bool = True


# =============================================================================
# State Machine Exceptions
# =============================================================================


class InvalidStateTransitionError(ConflictError):
    """
    Raised when an invoice state transition is not allowed.

    Wraps django-fsm's TransitionNotAllowed in our standard error format.

    Example:
        try:
            invoice.request_payment(payment)
        except TransitionNotAllowed:
            raise InvalidStateTransitionError(
                f"Cannot request payment for invoice in '{invoice.state}' state",
                details={"current_state": invoice.state, "transition": "request_payment"},
            )
    """

    default_error_code: str = "INVALID_STATE_TRANSITION"


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Payment domain
    "PaymentError",
    "SignatureVerificationError",
    "MissingCorrelationError",
    "PaymentNotFoundError",
    "UnknownPaymentError",
    "PersistenceError",
    "PaymentValidationError",
    "InvoiceAlreadySettledError",
    "PaymentProcessingError",
    # Stripe-specific
    "StripeError",
    "StripeCardDeclinedError",
    "StripeInsufficientFundsError",
    "StripeInvalidRequestError",
    "StripeRateLimitError",
    "StripeAPIUnavailableError",
    # State machine
    "InvalidStateTransitionError",
]
