from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Cart(models.Model):
    """Server-side cart, one per user"""
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='cart')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    def __str__(self):
        return f"Cart of {self.user.email}"

    @property
    def item_count(self):
        return len(self.items.all())

    @property
    def total_items(self):
        return sum(item.quantity for item in self.items.all())

    @property
    def total_value(self):
        return sum((item.subtotal for item in self.items.all()), Decimal('0.00'))

    class Meta:
        db_table = 'carts'


class CartItem(models.Model):
    """Cart line with the product name and price captured when it was added"""
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='cart_items')
    variant_id = models.CharField(max_length=50, blank=True, default='')
    variant_name = models.CharField(max_length=100, blank=True)
    product_name = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    added_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.quantity} x {self.product_name}"

    @property
    def subtotal(self):
        return self.price * self.quantity

    class Meta:
        db_table = 'cart_items'
        ordering = ['added_at', 'id']
        unique_together = [('cart', 'product', 'variant_id')]
