from django.urls import path
from .views import (
    api_index, health, api_docs,
    register, login, refresh_token, me, logout, update_profile, change_password,
    forgot_password, reset_password, verify_email, resend_verification,
    send_email_otp_view, verify_email_otp,
    address_list_create, address_detail, wishlist, wishlist_item,
    admin_user_list, admin_user_role, audit_log_list
)

urlpatterns = [
    path('', api_index, name='api-index'),
    path('health/', health, name='health'),
    path('docs/', api_docs, name='api-docs'),

    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', login, name='login'),
    path('auth/refresh/', refresh_token, name='token-refresh'),
    path('auth/me/', me, name='auth-me'),
    path('auth/logout/', logout, name='logout'),
    path('auth/profile/', update_profile, name='update-profile'),
    path('auth/password/', change_password, name='change-password'),
    path('auth/forgot-password/', forgot_password, name='forgot-password'),
    path('auth/reset-password/', reset_password, name='reset-password'),
    path('auth/verify-email/', verify_email, name='verify-email'),
    path('auth/resend-verification/', resend_verification, name='resend-verification'),
    path('auth/send-email-otp/', send_email_otp_view, name='send-email-otp'),
    path('auth/verify-email-otp/', verify_email_otp, name='verify-email-otp'),

    # User endpoints
    path('user/addresses/', address_list_create, name='address-list-create'),
    path('user/addresses/<int:pk>/', address_detail, name='address-detail'),
    path('user/wishlist/', wishlist, name='wishlist'),
    path('user/wishlist/<int:product_id>/', wishlist_item, name='wishlist-item'),

    # Admin user endpoints
    path('admin/users/', admin_user_list, name='admin-user-list'),
    path('admin/users/<int:pk>/role/', admin_user_role, name='admin-user-role'),
    path('admin/audit-logs/', audit_log_list, name='admin-audit-log-list'),
]
