from django.urls import path
from .views import (
    order_list_create, order_detail, order_cancel, order_return, order_tracking,
    admin_order_list, admin_order_detail, admin_order_status
)

urlpatterns = [
    path('orders/', order_list_create, name='order-list-create'),
    path('orders/<int:pk>/', order_detail, name='order-detail'),
    path('orders/<int:pk>/cancel/', order_cancel, name='order-cancel'),
    path('orders/<int:pk>/return/', order_return, name='order-return'),
    path('orders/<int:pk>/tracking/', order_tracking, name='order-tracking'),

    # Admin order endpoints
    path('admin/orders/', admin_order_list, name='admin-order-list'),
    path('admin/orders/<int:pk>/', admin_order_detail, name='admin-order-detail'),
    path('admin/orders/<int:pk>/status/', admin_order_status, name='admin-order-status'),
]
