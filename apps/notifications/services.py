"""
Service layer for notifications app.

- send_notification_email: Best-effort HTML/text email, never raises
- render_digest_email: Subject + bodies for the daily deadline digest
- Digest log helpers: digest day key, lookup, slot claim and result
"""

import logging
from email.utils import make_msgid

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.db import IntegrityError, transaction
from django.template.loader import render_to_string

from . import deadlines
from .models import DigestLogEntry

logger = logging.getLogger(__name__)


# =============================================================================
# Email sending
# =============================================================================

def send_notification_email(to_email, subject, html_body, text_body='', from_email=None):
    """
    Send an email with HTML and plain text alternatives.

    Transport errors are logged and returned rather than raised; the
    connection timeout comes from settings.EMAIL_TIMEOUT.

    Args:
        to_email: Recipient email address
        subject: Email subject
        html_body: Rendered HTML body
        text_body: Rendered plain text body
        from_email: Sender (defaults to settings.DEFAULT_FROM_EMAIL)

    Returns:
        dict with 'success', 'message_id' and 'error'
    """
    message_id = make_msgid(domain='smarttask.local')
    try:
        email = EmailMultiAlternatives(
            subject=subject,
            body=text_body,
            from_email=from_email or settings.DEFAULT_FROM_EMAIL,
            to=[to_email],
            headers={'Message-ID': message_id},
        )
        email.attach_alternative(html_body, 'text/html')
        sent = email.send()
    except Exception as e:
        logger.error(f'Failed to send email to {to_email}: {e}')
        return {'success': False, 'message_id': None, 'error': str(e) or e.__class__.__name__}

    if not sent:
        return {'success': False, 'message_id': None, 'error': 'Email backend accepted no messages'}
    return {'success': True, 'message_id': message_id, 'error': None}


def _email_rows(summaries, tz):
    rows = []
    for summary in summaries:
        rows.append({
            **summary,
            'deadline_display': deadlines.format_deadline(
                summary['deadline_date'], summary['deadline_time'], tz
            ),
        })
    return rows


def render_digest_email(user, bucket, tz=None):
    """
    Render the daily deadline digest.

    Args:
        user: Recipient User
        bucket: {'overdue': [...], 'upcoming': [...]} task summaries
        tz: Calendar timezone override

    Returns:
        (subject, html_body, text_body)
    """
    tz = deadlines.calendar_timezone(tz)
    upcoming = _email_rows(bucket['upcoming'], tz)
    overdue = _email_rows(bucket['overdue'], tz)
    total = len(upcoming) + len(overdue)

    context = {
        'user': user,
        'user_name': user.get_full_name(),
        'upcoming': upcoming,
        'overdue': overdue,
        'total': total,
        'window_hours': getattr(settings, 'UPCOMING_WINDOW_HOURS', 48),
        'dashboard_url': f"{settings.SITE_URL.rstrip('/')}/dashboard",
    }

    subject = f'Reminder: {total} task(s) need your attention'
    html_body = render_to_string('notifications/emails/deadline_digest.html', context)
    text_body = render_to_string('notifications/emails/deadline_digest.txt', context)
    return subject, html_body, text_body


# =============================================================================
# Digest log
# =============================================================================

def digest_date_for(now, tz=None):
    """Digest day key (YYYY-MM-DD) for ``now`` in the calendar timezone."""
    return deadlines.localize(now, tz).strftime('%Y-%m-%d')


def get_digest_entry(user_id, digest_date):
    """Existing log entry for the user and day, or None."""
    return DigestLogEntry.objects.for_day(user_id, digest_date)


def claim_digest_slot(user_id, digest_date, bucket, now):
    """
    Insert the day's digest log entry as pending, before anything is sent.

    Returns:
        (entry, claimed). When another run already holds the same
        (user, digest_date) key, the existing entry is returned with
        claimed=False and nothing is written; the caller must not send.
    """
    try:
        with transaction.atomic():
            entry = DigestLogEntry.objects.create(
                user_id=user_id,
                digest_date=digest_date,
                status=DigestLogEntry.Status.PENDING,
                upcoming_count=len(bucket['upcoming']),
                overdue_count=len(bucket['overdue']),
                sent_at=now,
            )
    except IntegrityError:
        logger.warning(
            f'Digest log for user {user_id} on {digest_date} already exists; '
            f'treating as already sent'
        )
        return get_digest_entry(user_id, digest_date), False
    return entry, True


def record_digest_result(entry, result, now):
    """Settle a claimed entry to sent or failed from a send result."""
    entry.status = DigestLogEntry.Status.SENT if result['success'] else DigestLogEntry.Status.FAILED
    entry.error_message = result.get('error')
    entry.provider_message_id = result.get('message_id')
    entry.sent_at = now
    entry.save(update_fields=['status', 'error_message', 'provider_message_id', 'sent_at'])
    return entry
