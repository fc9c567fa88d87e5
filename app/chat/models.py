"""
Chat models.

Participants of a task exchange messages inside a conversation.

Models:
    Conversation: Container for messages between participants, optionally
        about a specific task
    Message: Individual message within a conversation

Design Decisions:
    - Membership is a plain many-to-many to User; there are no roles
    - last_message_at is denormalized on the conversation for list sorting
      and is advanced whenever a message is created
    - read_at is per message; a message is read once the recipient opened it
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class Conversation(UUIDPrimaryKeyMixin, BaseModel):
    """
    A conversation between two or more users.

    Fields:
        task: Task the conversation is about (optional)
        title: Optional title
        created_by: User who opened the conversation
        participants: Users who can read and post
        last_message_at: Timestamp of most recent message (for sorting)
    """

    task = models.ForeignKey(
        "marketplace.Task",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="conversations",
    )
    title = models.CharField(max_length=100, blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_conversations",
    )
    participants = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="conversations",
    )
    last_message_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Timestamp of most recent message (for sorting conversation lists)",
    )

    class Meta:
        ordering = ["-last_message_at", "-created_at"]

    def __str__(self) -> str:
        if self.title:
            return self.title
        return f"Conversation({self.pk})"

    def unread_for(self, user):
        """Messages in this conversation the given user has not read yet."""
        return self.messages.filter(read_at__isnull=True).exclude(sender=user)


class Message(UUIDPrimaryKeyMixin, BaseModel):
    """
    A message within a conversation.

    Fields:
        conversation: Conversation this message belongs to
        sender: User who sent the message (NULL once the account is removed)
        content: Message text
        read_at: When the recipient read the message (NULL while unread)
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sent_messages",
    )
    content = models.TextField()
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["conversation", "created_at"],
                name="chat_msg_conv_created_idx",
            ),
            models.Index(
                fields=["conversation"],
                name="chat_msg_unread_idx",
                condition=Q(read_at__isnull=True),
            ),
        ]

    def __str__(self) -> str:
        preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"{self.sender_id or 'deleted user'}: {preview}"

    def save(self, *args, **kwargs):
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            # Only move forward; concurrent posts may commit out of order
            Conversation.objects.filter(
                Q(last_message_at__isnull=True) | Q(last_message_at__lt=self.created_at),
                pk=self.conversation_id,
            ).update(last_message_at=self.created_at)

    def mark_read(self, at=None) -> bool:
        """
        Mark the message as read.

        Returns:
            True if this call marked it, False if it was already read
        """
        at = at or timezone.now()
        updated = Message.objects.filter(pk=self.pk, read_at__isnull=True).update(
            read_at=at
        )
        if updated:
            self.read_at = at
        return bool(updated)
