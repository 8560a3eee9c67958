"""
Admin configuration for notifications app.

Both models are written only by the notification engine, so the admin is
read-only apart from the unread flag.
"""

from django.contrib import admin

from .models import SystemNotification, DigestLogEntry


@admin.register(SystemNotification)
class SystemNotificationAdmin(admin.ModelAdmin):
    """Admin for SystemNotification model."""

    list_display = ('user', 'kind', 'title', 'severity', 'unread', 'last_triggered_at')
    list_filter = ('kind', 'severity', 'unread')
    search_fields = ('user__email', 'title', 'message')
    ordering = ('-last_triggered_at',)

    readonly_fields = (
        'user', 'kind', 'title', 'message', 'severity',
        'last_triggered_at', 'tracking_metadata', 'created_at', 'updated_at'
    )

    def has_add_permission(self, request):
        """Rows are upserted by the reconciler only."""
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user')


@admin.register(DigestLogEntry)
class DigestLogEntryAdmin(admin.ModelAdmin):
    """Admin for DigestLogEntry model."""

    list_display = (
        'digest_date', 'user', 'status', 'upcoming_count',
        'overdue_count', 'sent_at'
    )
    list_filter = ('status', 'digest_date')
    search_fields = ('user__email', 'error_message')
    ordering = ('-digest_date',)

    readonly_fields = (
        'user', 'digest_date', 'status', 'upcoming_count', 'overdue_count',
        'error_message', 'provider_message_id', 'sent_at', 'created_at'
    )

    def has_add_permission(self, request):
        """Prevent manual creation of digest logs."""
        return False

    def has_change_permission(self, request, obj=None):
        """Digest logs are immutable once written."""
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user')
