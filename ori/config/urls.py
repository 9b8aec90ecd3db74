"""
URL configuration for the ORI API.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "ORI Administración"
admin.site.site_title = "ORI Admin"
admin.site.index_title = "Panel de administración ORI"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('ori.core.urls')),
    path('api/v1/', include('ori.catalog.urls')),
    path('api/v1/', include('ori.inventory.urls')),
    path('api/v1/', include('ori.crm.urls')),
    path('api/v1/', include('ori.sales.urls')),
    path('api/v1/', include('ori.purchasing.urls')),
    path('api/v1/', include('ori.logistics.urls')),
    path('api/v1/', include('ori.billing.urls')),
    path('api/v1/', include('ori.tasks.urls')),
    path('api/v1/', include('ori.prospecting.urls')),
    path('api/v1/', include('ori.communication.urls')),
    path('api/v1/', include('ori.reports.urls')),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]
