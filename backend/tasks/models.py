"""
Task Model for the Task Tracker.

This module defines the Task model: a time-boxed piece of work with a
priority level, owned by a single user.
"""

from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator


class TaskStatus(models.TextChoices):
    PENDING = 'Pending', 'Pending'
    FINISHED = 'Finished', 'Finished'


class TaskQuerySet(models.QuerySet):

    def for_user(self, user):
        """All tasks owned by ``user``, in no particular order."""
        return self.filter(user=user)


class Task(models.Model):
    """
    Represents a time-boxed task.

    Attributes:
        user: The owning user
        title: The task's descriptive title
        priority: Priority level from 1 to 5
        status: Pending or Finished
        start_time: When work on the task starts
        end_time: Estimated (and user-editable) completion deadline
        actual_end_time: When the task was marked Finished
        created_at: Timestamp of task creation
        updated_at: Timestamp of the last change
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    title = models.CharField(max_length=255, help_text="Task title")
    priority = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text="Priority level from 1 to 5"
    )
    status = models.CharField(
        max_length=10,
        choices=TaskStatus.choices,
        default=TaskStatus.PENDING
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField(help_text="Estimated completion time")
    actual_end_time = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TaskQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} (Priority: {self.priority})"

    def clean(self):
        """Validate the task data."""
        from django.core.exceptions import ValidationError

        if self.title is not None and not self.title.strip():
            raise ValidationError({'title': 'Title cannot be empty'})

        # Only enforced at creation; later edits may move end_time freely.
        if (self._state.adding and self.start_time and self.end_time
                and self.end_time <= self.start_time):
            raise ValidationError({'end_time': 'End time must be after start time'})

    @property
    def is_finished(self) -> bool:
        return self.status == TaskStatus.FINISHED
