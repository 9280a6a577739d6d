"""
Task Model for the task manager.

This module defines the Task model. Its importance and urgency columns are
the coordinates the priority ordering engine reads and rewrites.
"""

from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator

from .coordinates import MAX_VALUE, MIDPOINT, MIN_VALUE, PriorityRecord, Quadrant, classify


class Task(models.Model):
    """
    A task owned by a single user.

    Attributes:
        owner_id: Opaque identifier of the owning user
        title: The task's descriptive title
        description: Optional free-form notes
        completed: Completed tasks are inactive and leave the ordering
        importance: Coordinate in [0, 1,000,000], default midpoint
        urgency: Coordinate in [0, 1,000,000], default midpoint
        created_at: Timestamp of task creation
    """

    owner_id = models.CharField(max_length=64, db_index=True)
    title = models.CharField(max_length=255, help_text="Task title")
    description = models.TextField(blank=True, default='')
    completed = models.BooleanField(default=False)
    importance = models.IntegerField(
        default=MIDPOINT,
        validators=[MinValueValidator(MIN_VALUE), MaxValueValidator(MAX_VALUE)],
        db_index=True,
        help_text="Importance coordinate from 0 to 1,000,000"
    )
    urgency = models.IntegerField(
        default=MIDPOINT,
        validators=[MinValueValidator(MIN_VALUE), MaxValueValidator(MAX_VALUE)],
        db_index=True,
        help_text="Urgency coordinate from 0 to 1,000,000"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-urgency', '-importance', 'id']

    def __str__(self):
        return f"{self.title} ({self.quadrant.title})"

    @property
    def active(self) -> bool:
        return not self.completed

    @property
    def quadrant(self) -> Quadrant:
        return classify(self.importance, self.urgency)

    def to_record(self) -> PriorityRecord:
        return PriorityRecord(
            id=self.pk,
            importance=self.importance,
            urgency=self.urgency,
            active=self.active
        )
