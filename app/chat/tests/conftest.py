"""
Test configuration and fixtures for chat tests.
"""

import pytest

from authentication.tests.factories import UserFactory
from chat.tests.factories import ConversationFactory


@pytest.fixture
def contractor(db):
    return UserFactory(name="Casey Contractor")


@pytest.fixture
def conversation(db, contractor):
    """Conversation between a client (creator) and a contractor."""
    return ConversationFactory(participants=[contractor])
