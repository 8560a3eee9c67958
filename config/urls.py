"""
URL configuration for smarttask project.
"""

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # App URLs
    path('notifications/', include('apps.notifications.urls', namespace='notifications')),
]

# Admin site customization
admin.site.site_header = 'SmartTask Administration'
admin.site.site_title = 'SmartTask Admin'
admin.site.index_title = 'Welcome to SmartTask Admin'
