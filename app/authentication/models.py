"""
Authentication models.

This module defines the marketplace user:
- User: Custom user model with email-based authentication and a marketplace role

Related files:
    - managers.py: Custom user manager for email-based creation
    - admin.py: Operator-facing admin registration

Security:
    - User passwords hashed with Django's PBKDF2
    - Role changes are an administrative action, never self-service
"""

import uuid

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    A user is both a potential client (posting or requesting tasks, paying
    invoices) and a potential contractor (fulfilling tasks, issuing invoices).
    The role only distinguishes marketplace administrators.

    Fields:
        id: UUID primary key
        email: Primary identifier, unique, used for login
        name: Display name shown to other participants
        role: user or admin
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        user = User.objects.create_user(
            email='client@example.com',
            password='securepassword',
            name='Jane Client',
        )
    """

    class Role(models.TextChoices):
        USER = "user", "User"
        ADMIN = "admin", "Admin"

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    # Primary identifier (replaces username)
    email = models.EmailField(
        unique=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    name = models.CharField(
        max_length=150,
        blank=True,
        help_text="Display name shown to other participants",
    )
    role = models.CharField(
        max_length=16,
        choices=Role.choices,
        default=Role.USER,
        db_index=True,
    )

    # Account status flags
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    # Timestamps
    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def get_full_name(self):
        """Return the display name, falling back to email."""
        return self.name.strip() or self.email

    def get_short_name(self):
        """Return the first word of the display name, falling back to email."""
        name = self.name.strip()
        return name.split()[0] if name else self.email

    @property
    def is_marketplace_admin(self) -> bool:
        return self.role == self.Role.ADMIN
