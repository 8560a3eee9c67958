"""
Views for notifications app.

JSON endpoints for:
- Notification centre (list, mark read, mark all read) for the current user
- Scheduler operations (manual digest run, schedule status) for staff
"""

from django.conf import settings
from django.contrib.admin.views.decorators import staff_member_required
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from .filters import SystemNotificationFilter
from .models import SystemNotification
from .tasks import run_digest_now


def serialize_notification(notification):
    return {
        'id': notification.pk,
        'kind': notification.kind,
        'title': notification.title,
        'message': notification.message,
        'severity': notification.severity,
        'unread': notification.unread,
        'last_triggered_at': notification.last_triggered_at.isoformat(),
        'metadata': notification.tracking_metadata,
    }


# =============================================================================
# Notification Centre
# =============================================================================

@login_required
@require_GET
def notification_list(request):
    """
    Current user's system notifications, newest trigger first.

    Query params: kind, unread (see SystemNotificationFilter)
    """
    queryset = SystemNotification.objects.filter(user=request.user)
    filterset = SystemNotificationFilter(request.GET, queryset=queryset)
    if not filterset.is_valid():
        return JsonResponse({'errors': filterset.errors.get_json_data()}, status=400)

    notifications = filterset.qs.order_by('-last_triggered_at')
    return JsonResponse({
        'notifications': [serialize_notification(n) for n in notifications],
        'unread_count': queryset.filter(unread=True).count(),
    })


@login_required
@require_POST
def mark_read(request, pk):
    """Mark one of the current user's notifications as read."""
    notification = get_object_or_404(SystemNotification, pk=pk, user=request.user)
    notification.mark_read()
    return JsonResponse(serialize_notification(notification))


@login_required
@require_POST
def mark_all_read(request):
    """Mark all of the current user's notifications as read."""
    updated = SystemNotification.objects.filter(
        user=request.user, unread=True
    ).update(unread=False)
    return JsonResponse({'updated': updated})


# =============================================================================
# Scheduler Operations
# =============================================================================

@staff_member_required
@require_POST
def scheduler_run(request):
    """Run the daily digest immediately and return its counters."""
    stats = run_digest_now()
    return JsonResponse({'success': True, 'stats': stats})


@staff_member_required
@require_GET
def scheduler_status(request):
    """Configured schedule for the notification jobs."""
    return JsonResponse({
        'timezone': settings.DEADLINE_TIME_ZONE,
        'digest': f'{settings.DIGEST_SEND_HOUR:02d}:{settings.DIGEST_SEND_MINUTE:02d} daily',
        'refresh_minutes': settings.OVERDUE_REFRESH_MINUTES,
        'upcoming_window_hours': settings.UPCOMING_WINDOW_HOURS,
    })
