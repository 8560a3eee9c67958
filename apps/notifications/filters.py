"""
Notification filters using django-filter.

Used by the notification centre list endpoint:
- kind: EMAIL_SENT / DUE_SOON / OVERDUE
- unread: true / false
"""

import django_filters

from .models import SystemNotification


class SystemNotificationFilter(django_filters.FilterSet):
    """
    Usage in views:
        filterset = SystemNotificationFilter(request.GET, queryset=queryset)
        notifications = filterset.qs
    """

    kind = django_filters.ChoiceFilter(
        choices=SystemNotification.Kind.choices,
        label='Kind',
    )
    unread = django_filters.BooleanFilter(
        label='Unread only',
    )

    class Meta:
        model = SystemNotification
        fields = ['kind', 'unread']
