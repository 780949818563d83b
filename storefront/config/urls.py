"""
URL configuration for the storefront project.

Every app mounts its routes under the `/api/` prefix.
"""
from django.conf import settings
from django.contrib import admin
from django.urls import path, include, re_path
from django.views.static import serve

from storefront.core.views import route_not_found

admin.site.site_header = "BBN Nutrition Admin Panel"
admin.site.site_title = "BBN Nutrition Admin Portal"
admin.site.index_title = "Welcome to the BBN Nutrition Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('storefront.core.urls')),
    path('api/', include('storefront.catalog.urls')),
    path('api/', include('storefront.cart.urls')),
    path('api/', include('storefront.orders.urls')),
    path('api/', include('storefront.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
    re_path(r'^api/.*$', route_not_found, name='route-not-found'),
]
