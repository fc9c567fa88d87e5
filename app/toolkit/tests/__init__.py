"""
Tests for toolkit app.

- test_email.py: EmailService tests

Usage:
    pytest toolkit/tests/
"""
