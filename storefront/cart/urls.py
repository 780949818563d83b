from django.urls import path
from .views import cart_detail, cart_add, cart_update, cart_remove, cart_clear, cart_sync, cart_stats

urlpatterns = [
    path('cart/', cart_detail, name='cart-detail'),
    path('cart/add/', cart_add, name='cart-add'),
    path('cart/update/', cart_update, name='cart-update'),
    path('cart/remove/', cart_remove, name='cart-remove'),
    path('cart/clear/', cart_clear, name='cart-clear'),
    path('cart/sync/', cart_sync, name='cart-sync'),
    path('cart/stats/', cart_stats, name='cart-stats'),
]
