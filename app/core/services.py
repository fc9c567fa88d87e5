"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with logging and transaction helpers

Pattern Comparison:
    - ServiceResult: Use for expected outcomes (handled, ignored, no-op)
    - Exceptions: Use for failures the caller must map (bad input, missing
      rows, database errors)

Usage:
    from core.services import BaseService, ServiceResult

    class PaymentService(BaseService):
        @classmethod
        def create_payment(cls, user, amount) -> ServiceResult[Payment]:
            with cls.atomic():
                payment = Payment.objects.create(user=user, amount=amount)

            cls.get_logger().info(f"Created payment {payment.id}")
            return ServiceResult.success(payment)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        message: Optional human-readable outcome (e.g. "event ignored")
        errors: Field-level errors for validation failures

    Usage:
        return ServiceResult.success(payment, message="payment marked paid")

        result = dispatch_webhook(event)
        if result:
            return JsonResponse({"message": result.message})
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    message: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T, message: str | None = None) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data
            message: Optional outcome description

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data, message=message)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)

        Returns:
            ServiceResult with success=False and error details
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
        )

    def to_response(self) -> dict[str, Any]:
        """
        Convert to a JSON-serializable response body.

        Returns:
            {"message": ...} on success, {"error": ..., "error_code": ...}
            on failure
        """
        if self.success:
            return {"message": self.message or "ok"}

        response: dict[str, Any] = {"error": self.error}
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        return response

    def __bool__(self) -> bool:
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Thin wrapper around Django's transaction.atomic() that makes
        transaction boundaries explicit in service code.

        Example:
            with cls.atomic():
                payment = Payment.objects.create(...)
                invoice.request_payment(payment)
                invoice.save()
        """
        with transaction.atomic():
            yield
