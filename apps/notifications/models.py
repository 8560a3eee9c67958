"""
Notification models.

Models:
- SystemNotification: Current-state notification, exactly one row per
  (user, kind). Rows are upserted on that pair and never deleted here.
- DigestLogEntry: One row per user per calendar day recording whether the
  deadline digest email went out. The unique (user, digest_date) key is
  claimed before sending and is the gate against duplicate sends.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone


class SystemNotification(models.Model):
    """
    System notification shown in the notification centre.

    This is not an event log: each (user, kind) pair holds the latest
    state and is rewritten in place by apps.notifications.reconciler.
    """

    class Kind(models.TextChoices):
        EMAIL_SENT = 'EMAIL_SENT', 'Digest Email Sent'
        DUE_SOON = 'DUE_SOON', 'Due Soon'
        OVERDUE = 'OVERDUE', 'Overdue'

    class Severity(models.TextChoices):
        INFO = 'info', 'Info'
        WARN = 'warn', 'Warning'
        CRITICAL = 'critical', 'Critical'

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='system_notifications',
    )
    kind = models.CharField(
        max_length=20,
        choices=Kind.choices,
    )
    title = models.CharField(max_length=255)
    message = models.TextField()
    severity = models.CharField(
        max_length=10,
        choices=Severity.choices,
        default=Severity.INFO,
    )
    unread = models.BooleanField(default=True, db_index=True)
    last_triggered_at = models.DateTimeField(
        default=timezone.now,
        help_text='When the underlying state last changed (or the digest was re-synced)'
    )
    tracking_metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text='Change-detection state (counts), not for display'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'system notification'
        verbose_name_plural = 'system notifications'
        ordering = ['-last_triggered_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'kind'],
                name='unique_system_notification_per_kind',
            ),
        ]
        indexes = [
            models.Index(fields=['user', 'unread'], name='notif_user_unread_idx'),
            models.Index(fields=['user', '-last_triggered_at'], name='notif_user_triggered_idx'),
        ]

    def __str__(self):
        return f"{self.get_kind_display()} for {self.user_id}: {self.title}"

    def mark_read(self):
        if self.unread:
            self.unread = False
            self.save(update_fields=['unread', 'updated_at'])


class DigestLogQuerySet(models.QuerySet):

    def for_day(self, user_id, digest_date):
        return self.filter(user_id=user_id, digest_date=digest_date).first()


class DigestLogEntry(models.Model):
    """
    Daily digest email log.

    One row per user per digest day (YYYY-MM-DD in the calendar timezone).
    The row is claimed as 'pending' before the email goes out and settled to
    'sent' or 'failed' afterwards. A second insert for the same key fails
    the unique constraint, so two overlapping runs cannot both send.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        SENT = 'sent', 'Sent'
        FAILED = 'failed', 'Failed'

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='digest_logs',
    )
    digest_date = models.CharField(
        max_length=10,
        db_index=True,
        help_text='YYYY-MM-DD in the deadline calendar timezone'
    )
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
    )
    upcoming_count = models.PositiveIntegerField(default=0)
    overdue_count = models.PositiveIntegerField(default=0)
    error_message = models.TextField(null=True, blank=True)
    provider_message_id = models.CharField(max_length=255, null=True, blank=True)
    sent_at = models.DateTimeField(default=timezone.now)

    created_at = models.DateTimeField(auto_now_add=True)

    objects = DigestLogQuerySet.as_manager()

    class Meta:
        verbose_name = 'digest log entry'
        verbose_name_plural = 'digest log entries'
        ordering = ['-digest_date', 'user_id']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'digest_date'],
                name='unique_digest_per_user_per_day',
            ),
        ]

    def __str__(self):
        return f"Digest {self.digest_date} for {self.user_id} ({self.status})"

    @property
    def total_count(self):
        return self.upcoming_count + self.overdue_count

    @property
    def is_sent(self):
        return self.status == self.Status.SENT
