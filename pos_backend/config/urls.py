"""
URL configuration for the POS backend.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "POS Backend Admin Panel"
admin.site.site_title = "POS Backend Admin Portal"
admin.site.index_title = "Store administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('pos_backend.core.urls')),
    path('api/v1/', include('pos_backend.locations.urls')),
    path('api/v1/', include('pos_backend.catalog.urls')),
    path('api/v1/', include('pos_backend.parties.urls')),
    path('api/v1/', include('pos_backend.sales.urls')),
    path('api/v1/', include('pos_backend.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
