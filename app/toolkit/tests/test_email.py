"""
Tests for EmailService.

Uses Django's locmem backend; sent messages land in mail.outbox.
"""

from smtplib import SMTPException
from unittest.mock import patch

import pytest
from django.core import mail
from django.template import TemplateDoesNotExist

from toolkit.services import EmailService


class TestSendRaw:
    def test_sends_text_and_html(self, settings):
        settings.DEFAULT_FROM_EMAIL = "billing@example.com"

        sent = EmailService.send_raw(
            to="client@example.com",
            subject="Hello",
            body_text="Plain",
            body_html="<p>Rich</p>",
        )

        assert sent is True
        message = mail.outbox[0]
        assert message.to == ["client@example.com"]
        assert message.from_email == "billing@example.com"
        assert message.body == "Plain"
        assert message.alternatives[0][0] == "<p>Rich</p>"

    def test_multiple_recipients_without_html(self):
        EmailService.send_raw(
            to=["a@example.com", "b@example.com"],
            subject="Hello",
            body_text="Plain",
            from_email="ops@example.com",
        )

        message = mail.outbox[0]
        assert message.to == ["a@example.com", "b@example.com"]
        assert message.from_email == "ops@example.com"
        assert message.alternatives == []

    def test_requires_a_recipient(self):
        with pytest.raises(ValueError):
            EmailService.send_raw(to=[], subject="Hello", body_text="Plain")

    def test_backend_errors_propagate(self):
        with patch(
            "toolkit.services.email.EmailMultiAlternatives.send",
            side_effect=SMTPException("refused"),
        ):
            with pytest.raises(SMTPException):
                EmailService.send_raw(to="a@example.com", subject="Hi", body_text="x")


class TestSendTemplate:
    def test_renders_text_and_html_templates(self):
        EmailService.send(
            to="client@example.com",
            subject="Your payment receipt",
            template_name="payments/emails/payment_receipt",
            context={
                "name": "Casey",
                "payment_id": "p-1",
                "amount": "123.45",
                "currency": "USD",
            },
        )

        message = mail.outbox[0]
        assert "Hi Casey" in message.body
        assert "123.45 USD" in message.body
        assert "<strong>123.45 USD</strong>" in message.alternatives[0][0]

    def test_html_template_is_optional(self):
        def render(template_name, context):
            if template_name.endswith(".html"):
                raise TemplateDoesNotExist(template_name)
            return "text only"

        with patch("toolkit.services.email.render_to_string", side_effect=render):
            EmailService.send(to="a@example.com", subject="Hi", template_name="notice")

        assert mail.outbox[0].body == "text only"
        assert mail.outbox[0].alternatives == []
