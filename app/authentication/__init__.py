"""
Authentication application.

Provides the email-identified marketplace User. Clients, contractors and
marketplace administrators are all Users; the role field separates admins.

Usage:
    from authentication.models import User
"""
