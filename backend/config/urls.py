"""
URL configuration for the municipal services backend.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Municipal Services Admin Panel"
admin.site.site_title = "Municipal Services Admin Portal"
admin.site.index_title = "Civil registry, cemetery and supplies administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.cemetery.urls')),
    path('api/v1/', include('backend.registry.urls')),
    path('api/v1/', include('backend.permits.urls')),
    path('api/v1/', include('backend.inventory.urls')),
    path('api/v1/', include('backend.locations.urls')),
    path('api/v1/', include('backend.purchasing.urls')),
    path('api/v1/', include('backend.requisitions.urls')),
    path('api/v1/', include('backend.physical_inventory.urls')),
    path('api/v1/', include('backend.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]
