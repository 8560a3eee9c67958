"""
URL configuration for notifications app.
"""

from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    # Notification centre
    path('', views.notification_list, name='notification_list'),
    path('read-all/', views.mark_all_read, name='mark_all_read'),
    path('<int:pk>/read/', views.mark_read, name='mark_read'),

    # Scheduler operations
    path('scheduler/run/', views.scheduler_run, name='scheduler_run'),
    path('scheduler/status/', views.scheduler_status, name='scheduler_status'),
]
