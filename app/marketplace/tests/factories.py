"""
Factory Boy factories for marketplace models.

Usage:
    from marketplace.tests.factories import TaskFactory, TaskAssignmentFactory

    task = TaskFactory(price=Decimal("80.00"))
    assignment = TaskAssignmentFactory(task=task)
"""

from decimal import Decimal

import factory

from authentication.tests.factories import UserFactory
from marketplace.models import AssignmentStatus, Review, Task, TaskAssignment


class TaskFactory(factory.django.DjangoModelFactory):
    """Open task with a unique slug."""

    class Meta:
        model = Task

    owner = factory.SubFactory(UserFactory)
    title = factory.Sequence(lambda n: f"Garden cleanup {n}")
    slug = factory.Sequence(lambda n: f"garden-cleanup-{n}")
    description = "Rake leaves and trim the hedge."
    category = "gardening"
    price = Decimal("80.00")


class TaskAssignmentFactory(factory.django.DjangoModelFactory):
    """Accepted assignment where the task owner is the client."""

    class Meta:
        model = TaskAssignment

    task = factory.SubFactory(TaskFactory)
    client = factory.SelfAttribute("task.owner")
    contractor = factory.SubFactory(UserFactory)
    status = AssignmentStatus.ACCEPTED


class ReviewFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Review

    task = factory.SubFactory(TaskFactory)
    reviewer = factory.SelfAttribute("task.owner")
    reviewee = factory.SubFactory(UserFactory)
    rating = 5
    comment = "Great work."
