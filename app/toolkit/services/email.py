"""
Email service for centralized email sending.

This module provides the EmailService class for sending emails with:
- Django template rendering for HTML and plain text
- Raw content emails built in code

Configuration:
    Email settings are read from Django settings:
    - EMAIL_BACKEND
    - EMAIL_HOST, EMAIL_PORT
    - DEFAULT_FROM_EMAIL

Usage:
    from toolkit.services.email import EmailService

    # Send email with template
    EmailService.send(
        to="user@example.com",
        subject="Your payment receipt",
        template_name="payments/emails/payment_receipt",
        context={"amount": "123.45"},
    )
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


class EmailService:
    """
    Centralized email sending with template support.

    Delivery errors from the backend propagate to the caller, so Celery
    tasks can retry on them.

    Usage:
        # Send template email
        EmailService.send(
            to="user@example.com",
            subject="Welcome!",
            template_name="welcome",
            context={"user_name": "John"},
        )

        # Send raw email
        EmailService.send_raw(
            to="user@example.com",
            subject="Quick note",
            body_text="Plain text content",
            body_html="<p>HTML content</p>",
        )
    """

    @classmethod
    def send(
        cls,
        to: str | list[str],
        subject: str,
        template_name: str,
        context: dict | None = None,
        from_email: str | None = None,
    ) -> bool:
        """
        Render ``{template_name}.txt`` (and ``.html`` when present) and send.

        Args:
            to: Recipient address or list of addresses
            subject: Email subject line
            template_name: Template path without extension
            context: Template context
            from_email: Sender address (default: DEFAULT_FROM_EMAIL)

        Returns:
            True if the backend accepted the message
        """
        context = context or {}
        body_text = render_to_string(f"{template_name}.txt", context)
        try:
            body_html = render_to_string(f"{template_name}.html", context)
        except TemplateDoesNotExist:
            body_html = None

        return cls.send_raw(
            to=to,
            subject=subject,
            body_text=body_text,
            body_html=body_html,
            from_email=from_email,
        )

    @classmethod
    def send_raw(
        cls,
        to: str | list[str],
        subject: str,
        body_text: str,
        body_html: str | None = None,
        from_email: str | None = None,
    ) -> bool:
        """
        Send an email with content built by the caller.

        Returns:
            True if the backend accepted the message
        """
        recipients = [to] if isinstance(to, str) else list(to)
        if not recipients:
            raise ValueError("At least one recipient is required")

        message = EmailMultiAlternatives(
            subject=subject,
            body=body_text,
            from_email=from_email or settings.DEFAULT_FROM_EMAIL,
            to=recipients,
        )
        if body_html:
            message.attach_alternative(body_html, "text/html")

        sent = message.send(fail_silently=False)

        logger.info(
            "Email sent",
            extra={"subject": subject, "recipient_count": len(recipients)},
        )
        return sent > 0
