"""
Admin configuration for tasks app.
"""

from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html

from apps.notifications import deadlines

from .models import Task


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """Admin for Task model."""

    list_display = (
        'title', 'owner', 'status_display', 'priority_display', 'complexity',
        'deadline_display', 'deadline_status_display', 'created_at'
    )
    list_filter = ('status', 'priority', 'complexity', 'deadline_date', 'created_at')
    search_fields = ('title', 'description', 'owner__email')
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    readonly_fields = ('created_at', 'updated_at', 'completed_at')

    fieldsets = (
        (None, {
            'fields': ('owner', 'title', 'description')
        }),
        ('Status & Priority', {
            'fields': ('status', 'priority', 'complexity')
        }),
        ('Deadline', {
            'fields': ('deadline_date', 'deadline_time')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'completed_at'),
            'classes': ('collapse',),
        }),
    )

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related('owner')

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            'not_started': '#FFA500',  # Orange
            'in_progress': '#3498db',  # Blue
            'done': '#27ae60',         # Green
        }
        color = colors.get(obj.status, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_status_display()
        )
    status_display.short_description = 'Status'
    status_display.admin_order_field = 'status'

    def priority_display(self, obj):
        """Display priority with color coding."""
        colors = {
            'low': '#95a5a6',
            'medium': '#3498db',
            'high': '#e74c3c',
        }
        color = colors.get(obj.priority, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_priority_display()
        )
    priority_display.short_description = 'Priority'
    priority_display.admin_order_field = 'priority'

    def deadline_display(self, obj):
        return deadlines.format_deadline(obj.deadline_date, obj.deadline_time) or '-'
    deadline_display.short_description = 'Deadline'
    deadline_display.admin_order_field = 'deadline_date'

    def deadline_status_display(self, obj):
        """Display overdue / today / soon markers."""
        status = obj.deadline_status(timezone.now())
        if status == deadlines.OVERDUE:
            return format_html('<span style="color: red;">⚠️ OVERDUE</span>')
        if status == deadlines.DEADLINE_TODAY:
            return format_html('<span style="color: #e67e22;">Due today</span>')
        if status == deadlines.DEADLINE_SOON:
            return format_html('<span style="color: #f1c40f;">Due soon</span>')
        return ''
    deadline_status_display.short_description = 'Deadline status'
