"""
Service layer for tasks app.

Task writes go through here so every create / update / delete schedules a
refresh of the owner's DUE_SOON / OVERDUE notifications once the
transaction commits.

Services:
- create_task: Create a task for an owner
- update_task: Update editable task fields
- change_status: Move a task through the status workflow
- delete_task: Delete a task
"""

import logging
from functools import partial

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.notifications import deadlines
from apps.notifications.tasks import refresh_notifications_for_user

from .models import Task

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    'title', 'description', 'priority', 'complexity',
    'deadline_date', 'deadline_time',
)


def _refresh_owner_notifications(owner_id):
    """Post-commit hook. A failure here must not undo the task write."""
    try:
        refresh_notifications_for_user(owner_id)
    except Exception:
        logger.exception(f'Notification refresh after task change failed for user {owner_id}')


def _schedule_refresh(owner_id):
    transaction.on_commit(partial(_refresh_owner_notifications, owner_id))


def _clean_deadline_time(value):
    if value in (None, ''):
        return deadlines.DEFAULT_DEADLINE_TIME
    if not deadlines.is_valid_deadline_time(value):
        raise ValidationError(f"Invalid deadline time: {value!r} (expected HH:mm).")
    return value


def _clean_choice(value, choices, label):
    if value not in choices.values:
        raise ValidationError(f"Invalid {label}: {value}")
    return value


def create_task(
    owner,
    title: str,
    description: str = '',
    deadline_date=None,
    deadline_time: str = deadlines.DEFAULT_DEADLINE_TIME,
    priority: str = Task.Priority.MEDIUM,
    complexity: str = Task.Complexity.MEDIUM,
    status: str = Task.Status.NOT_STARTED,
):
    """
    Create a task for owner.

    Args:
        owner: User the task belongs to (required)
        title: Task title (required)
        description: Task description (optional)
        deadline_date: Calendar date the task is due (optional)
        deadline_time: "HH:mm" (default: 23:59)
        priority: high/medium/low (default: medium)
        complexity: easy/medium/hard (default: medium)
        status: not_started/in_progress/done (default: not_started)

    Returns:
        Created Task instance

    Raises:
        ValidationError: If a field is missing or malformed
    """
    if not owner:
        raise ValidationError("Owner is required.")

    if not title or not title.strip():
        raise ValidationError("Task title is required.")

    with transaction.atomic():
        task = Task.objects.create(
            owner=owner,
            title=title.strip(),
            description=description.strip() if description else '',
            deadline_date=deadline_date,
            deadline_time=_clean_deadline_time(deadline_time),
            priority=_clean_choice(priority, Task.Priority, 'priority'),
            complexity=_clean_choice(complexity, Task.Complexity, 'complexity'),
            status=_clean_choice(status, Task.Status, 'status'),
            completed_at=timezone.now() if status == Task.Status.DONE else None,
        )
        _schedule_refresh(task.owner_id)

    logger.info(f'Task {task.pk} created for user {task.owner_id}')
    return task


def update_task(task, **kwargs):
    """
    Update task fields.

    Args:
        task: Task instance to update
        **kwargs: Fields to update (title, description, priority, complexity,
                  deadline_date, deadline_time)

    Returns:
        Updated Task instance

    Raises:
        ValidationError: If validation fails
    """
    changed = []

    for field in EDITABLE_FIELDS:
        if field not in kwargs:
            continue
        new_value = kwargs[field]

        if field == 'title':
            if not new_value or not new_value.strip():
                raise ValidationError("Task title cannot be empty.")
            new_value = new_value.strip()
        elif field == 'description':
            new_value = new_value.strip() if new_value else ''
        elif field == 'priority':
            new_value = _clean_choice(new_value, Task.Priority, 'priority')
        elif field == 'complexity':
            new_value = _clean_choice(new_value, Task.Complexity, 'complexity')
        elif field == 'deadline_time':
            new_value = _clean_deadline_time(new_value)

        if getattr(task, field) != new_value:
            setattr(task, field, new_value)
            changed.append(field)

    if not changed:
        return task

    with transaction.atomic():
        task.save(update_fields=changed + ['updated_at'])
        _schedule_refresh(task.owner_id)

    logger.info(f"Task {task.pk} updated: {', '.join(changed)}")
    return task


def change_status(task, new_status):
    """
    Change task status.

    Moving to done stamps completed_at; moving away from done clears it.

    Raises:
        ValidationError: If new_status is not a valid status
    """
    new_status = _clean_choice(new_status, Task.Status, 'status')
    if task.status == new_status:
        return task

    old_status = task.status
    task.status = new_status
    task.completed_at = timezone.now() if new_status == Task.Status.DONE else None

    with transaction.atomic():
        task.save(update_fields=['status', 'completed_at', 'updated_at'])
        _schedule_refresh(task.owner_id)

    logger.info(f'Task {task.pk} status changed from {old_status} to {new_status}')
    return task


def delete_task(task):
    """Delete a task and refresh its owner's notifications."""
    owner_id = task.owner_id
    task_id = task.pk

    with transaction.atomic():
        task.delete()
        _schedule_refresh(owner_id)

    logger.info(f'Task {task_id} deleted for user {owner_id}')
