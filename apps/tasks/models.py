"""
Task management models.

Models:
- Task: Personal task with a calendar deadline date, an optional HH:mm
  deadline time, and a three-step status workflow.
"""

from django.db import models
from django.conf import settings

from apps.notifications import deadlines


class Task(models.Model):
    """
    Main Task model.

    The deadline is stored as a calendar date plus an "HH:mm" string and is
    interpreted in settings.DEADLINE_TIME_ZONE (see apps.notifications.deadlines).

    Status workflow: not_started → in_progress → done
    """

    class Status(models.TextChoices):
        NOT_STARTED = 'not_started', 'Not Started'
        IN_PROGRESS = 'in_progress', 'In Progress'
        DONE = 'done', 'Done'

    class Priority(models.TextChoices):
        HIGH = 'high', 'High'
        MEDIUM = 'medium', 'Medium'
        LOW = 'low', 'Low'

    class Complexity(models.TextChoices):
        EASY = 'easy', 'Easy'
        MEDIUM = 'medium', 'Medium'
        HARD = 'hard', 'Hard'

    # Core fields
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='tasks',
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    status = models.CharField(
        max_length=15,
        choices=Status.choices,
        default=Status.NOT_STARTED,
        db_index=True,
    )
    priority = models.CharField(
        max_length=10,
        choices=Priority.choices,
        default=Priority.MEDIUM,
    )
    complexity = models.CharField(
        max_length=10,
        choices=Complexity.choices,
        default=Complexity.MEDIUM,
    )

    # Deadline
    deadline_date = models.DateField(
        null=True,
        blank=True,
        db_index=True,
        help_text='Calendar date the task is due'
    )
    deadline_time = models.CharField(
        max_length=5,
        default=deadlines.DEFAULT_DEADLINE_TIME,
        blank=True,
        help_text='HH:mm, defaults to 23:59'
    )

    # Legacy per-task marker; notification state is reconciled per user
    overdue_notified = models.BooleanField(
        default=False,
        help_text='Legacy overdue notification marker (not used by reconciliation)'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = 'task'
        verbose_name_plural = 'tasks'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['owner', 'status'], name='task_owner_status_idx'),
            models.Index(fields=['owner', 'deadline_date'], name='task_owner_deadline_idx'),
            models.Index(fields=['status', 'deadline_date'], name='task_status_deadline_idx'),
        ]

    def __str__(self):
        return self.title

    @property
    def is_done(self):
        return self.status == self.Status.DONE

    @property
    def effective_deadline(self):
        """Aware datetime the task becomes overdue after, or None."""
        return deadlines.effective_deadline(self.deadline_date, self.deadline_time)

    def deadline_status(self, now):
        """Display status: overdue / deadline-today / deadline-soon / safe / done."""
        return deadlines.classify(self, now)

    def is_overdue(self, now):
        return deadlines.is_overdue(self, now)
