from django.urls import path
from . import views

urlpatterns = [
    path('admin/dashboard/', views.dashboard, name='admin-dashboard'),
    path('admin/products/analytics/', views.product_analytics, name='admin-product-analytics'),
]
