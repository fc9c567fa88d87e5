"""
Payments app configuration.

This app settles client payments for marketplace invoices:
- Charge creation with correlation metadata
- Webhook verification and reconciliation
- Receipt emails
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
