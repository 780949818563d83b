from django.urls import path
from .views import (
    category_list, category_detail, admin_category_list_create, admin_category_detail,
    product_list, product_detail, product_review_create,
    admin_product_list_create, admin_product_detail,
    admin_bulk_update_stock, admin_bulk_update_featured, admin_bulk_delete
)

urlpatterns = [
    # Public catalog endpoints
    path('products/', product_list, name='product-list'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('products/<int:pk>/reviews/', product_review_create, name='product-review-create'),
    path('categories/', category_list, name='category-list'),
    path('categories/<str:identifier>/', category_detail, name='category-detail'),

    # Admin product endpoints (bulk routes before <int:pk>)
    path('admin/products/', admin_product_list_create, name='admin-product-list-create'),
    path('admin/products/bulk-stock/', admin_bulk_update_stock, name='admin-product-bulk-stock'),
    path('admin/products/bulk-featured/', admin_bulk_update_featured, name='admin-product-bulk-featured'),
    path('admin/products/bulk/', admin_bulk_delete, name='admin-product-bulk-delete'),
    path('admin/products/<int:pk>/', admin_product_detail, name='admin-product-detail'),

    # Admin category endpoints
    path('admin/categories/', admin_category_list_create, name='admin-category-list-create'),
    path('admin/categories/<int:pk>/', admin_category_detail, name='admin-category-detail'),
]
