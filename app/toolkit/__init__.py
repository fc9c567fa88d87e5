"""
Toolkit - shared services used across marketplace apps.

Key components:
    - services/email.py: EmailService for template and raw emails

Usage:
    from toolkit.services import EmailService

Note:
    This app has no models. For model-layer base classes see core/.
"""
