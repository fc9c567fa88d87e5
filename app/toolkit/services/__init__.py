"""
Service classes for toolkit app.

- EmailService: Email sending with template support

Usage:
    from toolkit.services import EmailService
"""

from toolkit.services.email import EmailService

__all__ = ["EmailService"]
