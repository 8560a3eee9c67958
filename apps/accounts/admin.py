"""
Admin configuration for accounts app.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _
from django.utils.html import format_html

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Custom User admin with email authentication and digest preferences.
    """

    list_display = (
        'email', 'full_name_display', 'is_active_display',
        'email_notifications', 'created_at'
    )
    list_filter = ('is_active', 'is_staff', 'email_notifications')
    search_fields = ('email', 'first_name', 'last_name')
    ordering = ('first_name', 'last_name')
    list_per_page = 25

    # Fieldsets for edit view
    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        (_('Personal Info'), {'fields': ('first_name', 'last_name')}),
        (_('Notifications'), {'fields': ('email_notifications',)}),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        (_('Important dates'), {
            'fields': ('last_login', 'created_at', 'updated_at'),
        }),
    )

    # Fieldsets for add view
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'email', 'first_name', 'last_name',
                'password1', 'password2', 'email_notifications'
            ),
        }),
    )

    readonly_fields = ('created_at', 'updated_at', 'last_login')

    actions = ['enable_digest_emails', 'disable_digest_emails']

    def full_name_display(self, obj):
        """Display full name."""
        return obj.get_full_name() or '-'
    full_name_display.short_description = 'Name'
    full_name_display.admin_order_field = 'first_name'

    def is_active_display(self, obj):
        """Display active status with icon."""
        if obj.is_active:
            return format_html('<span style="color: {};">●</span> Active', '#059669')
        return format_html('<span style="color: {};">●</span> Inactive', '#DC2626')
    is_active_display.short_description = 'Status'
    is_active_display.admin_order_field = 'is_active'

    def enable_digest_emails(self, request, queryset):
        """Opt selected users into the daily digest."""
        count = queryset.update(email_notifications=True)
        self.message_user(request, f'Digest emails enabled for {count} user(s).')
    enable_digest_emails.short_description = 'Enable daily digest email'

    def disable_digest_emails(self, request, queryset):
        """Opt selected users out of the daily digest."""
        count = queryset.update(email_notifications=False)
        self.message_user(request, f'Digest emails disabled for {count} user(s).')
    disable_digest_emails.short_description = 'Disable daily digest email'
