"""
Shared helpers for the test suite.
"""

from datetime import date, datetime
from types import SimpleNamespace
from zoneinfo import ZoneInfo

from django.contrib.auth import get_user_model

from apps.tasks.models import Task

LOCAL_TZ = ZoneInfo('Asia/Ho_Chi_Minh')


def local_dt(year, month, day, hour=0, minute=0, second=0, microsecond=0):
    """Aware datetime in the deadline calendar timezone."""
    return datetime(year, month, day, hour, minute, second, microsecond, tzinfo=LOCAL_TZ)


def task_stub(pk=1, owner_id=1, deadline_date=None, deadline_time='23:59',
              status='in_progress', title=None, overdue_notified=False):
    """Task-like object for tests that don't need the database."""
    if isinstance(deadline_date, str):
        deadline_date = date.fromisoformat(deadline_date)
    return SimpleNamespace(
        pk=pk,
        id=pk,
        owner_id=owner_id,
        title=title or f'Task {pk}',
        deadline_date=deadline_date,
        deadline_time=deadline_time,
        status=status,
        priority='medium',
        complexity='medium',
        overdue_notified=overdue_notified,
    )


def create_user(email='user@example.com', **extra_fields):
    extra_fields.setdefault('first_name', 'Test')
    extra_fields.setdefault('last_name', 'User')
    return get_user_model().objects.create_user(email=email, password='testpass123', **extra_fields)


def create_task(owner, title='Task', deadline_date=None, deadline_time='23:59',
                status=Task.Status.IN_PROGRESS, **extra_fields):
    """Insert a task directly, bypassing the service layer hooks."""
    if isinstance(deadline_date, str):
        deadline_date = date.fromisoformat(deadline_date)
    return Task.objects.create(
        owner=owner,
        title=title,
        deadline_date=deadline_date,
        deadline_time=deadline_time,
        status=status,
        **extra_fields,
    )
