"""
Marketplace models.

Models:
    Task: A unit of work (cleaning, gardening, ...) posted by its owner
    TaskAssignment: A contractor engaged by a client to fulfil a task
    Review: Feedback one participant leaves about another after a task

Design Decisions:
    - All references are explicit foreign keys; reverse accessors are used
      for lookups only, never for ownership
    - Indexes follow the lookup paths of the application: by owner/client/
      contractor and status
    - Prices are decimals in major currency units
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils.text import slugify

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class TaskStatus(models.TextChoices):
    OPEN = "open", "Open"
    ASSIGNED = "assigned", "Assigned"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class AssignmentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    ACCEPTED = "accepted", "Accepted"
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class Task(UUIDPrimaryKeyMixin, BaseModel):
    """
    A unit of work offered on the marketplace.

    Fields:
        owner: User who posted the task
        title: Short human-readable title
        slug: Unique URL-safe identifier derived from the title
        description: Free-form details
        category: Service category (cleaning, gardening, ...)
        price: Asking price in major currency units
        status: Lifecycle status of the task

    Relationships:
        assignments: TaskAssignment records for this task
        reviews: Review records for this task
        invoice_items: InvoiceItem records billing this task
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="tasks",
    )
    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=64)
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    status = models.CharField(
        max_length=16,
        choices=TaskStatus.choices,
        default=TaskStatus.OPEN,
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner", "status"], name="mkt_task_owner_status_idx"),
            models.Index(
                fields=["category", "status"], name="mkt_task_category_status_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(price__gte=0),
                name="mkt_task_price_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = self._unique_slug()
        super().save(*args, **kwargs)

    def _unique_slug(self) -> str:
        base = slugify(self.title)[:200] or "task"
        slug = base
        suffix = 2
        while Task.objects.filter(slug=slug).exclude(pk=self.pk).exists():
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug


class TaskAssignment(UUIDPrimaryKeyMixin, BaseModel):
    """
    Engagement of a contractor by a client for a task.

    A contractor can be assigned to a given task only once; the client is
    usually the task owner but is stored explicitly because requested tasks
    are posted by the contractor.
    """

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name="assignments",
    )
    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="client_assignments",
    )
    contractor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="contractor_assignments",
    )
    status = models.CharField(
        max_length=16,
        choices=AssignmentStatus.choices,
        default=AssignmentStatus.PENDING,
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["client", "status"], name="mkt_assign_client_status_idx"
            ),
            models.Index(
                fields=["contractor", "status"],
                name="mkt_assign_contr_status_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["task", "contractor"],
                name="mkt_unique_task_contractor",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.task} → {self.contractor}"


class Review(UUIDPrimaryKeyMixin, BaseModel):
    """
    Rating and comment left by one participant of a task about another.

    Each reviewer reviews a task at most once. Ratings are 1..5, enforced by
    a database check as well as model validators.
    """

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews_written",
    )
    reviewee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews_received",
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    comment = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["reviewee", "-created_at"], name="mkt_review_reviewee_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["task", "reviewer"],
                name="mkt_unique_task_reviewer",
            ),
            models.CheckConstraint(
                condition=Q(rating__gte=1) & Q(rating__lte=5),
                name="mkt_review_rating_range",
            ),
            models.CheckConstraint(
                condition=~Q(reviewer=F("reviewee")),
                name="mkt_review_not_self",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.reviewer} → {self.reviewee}: {self.rating}"
