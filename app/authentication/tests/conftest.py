"""
Test configuration and fixtures for authentication tests.
"""

import pytest

from authentication.tests.factories import UserFactory


@pytest.fixture
def user(db):
    """A regular, active marketplace user."""
    return UserFactory()


@pytest.fixture
def marketplace_admin(db):
    """A marketplace administrator with admin site access."""
    return UserFactory(role="admin", is_staff=True)
