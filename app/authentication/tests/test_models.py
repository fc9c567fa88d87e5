"""
Tests for the User model.
"""

import uuid

import pytest
from django.db import IntegrityError

from authentication.models import User
from authentication.tests.factories import UserFactory


class TestUserModel:
    """Field defaults, constraints and display helpers."""

    def test_primary_key_is_uuid(self, user):
        assert isinstance(user.pk, uuid.UUID)

    def test_email_must_be_unique(self, user):
        """
        Email is the USERNAME_FIELD, so duplicates would make login
        ambiguous. The database enforces uniqueness.
        """
        with pytest.raises(IntegrityError):
            User.objects.create_user(email=user.email, password="Different123!")

    def test_str_returns_email(self, user):
        assert str(user) == user.email

    def test_get_full_name_uses_display_name(self, db):
        user = UserFactory(name="  Jane Client ")

        assert user.get_full_name() == "Jane Client"
        assert user.get_short_name() == "Jane"

    def test_get_full_name_falls_back_to_email(self, db):
        user = UserFactory(name="")

        assert user.get_full_name() == user.email
        assert user.get_short_name() == user.email

    def test_marketplace_admin_flag_follows_role(self, user, marketplace_admin):
        assert user.is_marketplace_admin is False
        assert marketplace_admin.is_marketplace_admin is True

    def test_date_joined_is_set_on_creation(self, user):
        assert user.date_joined is not None
        assert user.updated_at is not None
