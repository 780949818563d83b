"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from storefront.core.models import Address, WishlistItem
from storefront.catalog.models import Category, Product, ProductVariant, ProductReview
from storefront.orders.models import Order, OrderItem, OrderStatusHistory
from decimal import Decimal
import random
import string

User = get_user_model()

DEFAULT_PASSWORD = 'Testpass123!'


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))

    @staticmethod
    def create_user(email=None, name=None, password=DEFAULT_PASSWORD, role=User.ROLE_USER, **extra):
        """Create a test user"""
        if not email:
            email = f'user_{TestDataFactory.random_string(6)}@test.com'
        return User.objects.create_user(
            email=email,
            password=password,
            name=name or 'Test User',
            role=role,
            **extra
        )

    @staticmethod
    def create_admin(email=None, password=DEFAULT_PASSWORD):
        """Create an admin user"""
        return TestDataFactory.create_user(email=email, name='Admin User', password=password,
                                           role=User.ROLE_ADMIN, email_verified=True)

    @staticmethod
    def create_address(user, is_default=False, **fields):
        defaults = {
            'type': 'home',
            'address': '12 MG Road',
            'city': 'Bengaluru',
            'state': 'Karnataka',
            'pin_code': '560001',
        }
        defaults.update(fields)
        return Address.objects.create(user=user, is_default=is_default, **defaults)

    @staticmethod
    def create_category(name=None, slug=None, parent=None, is_active=True):
        """Create a test category"""
        if not name:
            name = f'Category {TestDataFactory.random_string(6)}'
        return Category.objects.create(
            name=name,
            slug=slug or name.lower().replace(' ', '-'),
            description=f'Test category {name}',
            parent=parent,
            is_active=is_active
        )

    @staticmethod
    def create_product(name=None, price=Decimal('100.00'), stock_quantity=50, category=None, **fields):
        """Create a test product"""
        if not name:
            name = f'Product {TestDataFactory.random_string(6)}'
        fields.setdefault('description', f'Test product {name}')
        fields.setdefault('in_stock', stock_quantity > 0)
        return Product.objects.create(
            name=name,
            price=price,
            stock_quantity=stock_quantity,
            category=category,
            **fields
        )

    @staticmethod
    def create_variant(product, variant_id='variant-0', name='1kg', price=Decimal('120.00'), stock_quantity=10):
        return ProductVariant.objects.create(
            product=product,
            variant_id=variant_id,
            name=name,
            price=price,
            stock_quantity=stock_quantity,
            in_stock=stock_quantity > 0
        )

    @staticmethod
    def create_review(product, user, rating=5, comment='Great'):
        return ProductReview.objects.create(product=product, user=user, rating=rating, comment=comment)

    @staticmethod
    def create_wishlist_item(user, product, variant_id='', **fields):
        return WishlistItem.objects.create(user=user, product=product, variant_id=variant_id, **fields)

    @staticmethod
    def create_order(user=None, product=None, quantity=1, status=Order.STATUS_PENDING,
                     payment_status=Order.PAYMENT_PENDING, **fields):
        """Create an order directly, without touching stock"""
        if product is None:
            product = TestDataFactory.create_product()
        subtotal = product.price * quantity
        order = Order.objects.create(
            user=user,
            subtotal=subtotal,
            total=subtotal,
            status=status,
            payment_status=payment_status,
            payment_method=fields.pop('payment_method', 'cod'),
            shipping_address=fields.pop('shipping_address', {'city': 'Bengaluru'}),
            billing_address=fields.pop('billing_address', {'city': 'Bengaluru'}),
            **fields
        )
        OrderItem.objects.create(order=order, product=product, name=product.name, price=product.price, quantity=quantity)
        OrderStatusHistory.objects.create(order=order, status=status, note='Created in test')
        return order

    @staticmethod
    def order_payload(product, quantity=1, variant_id=None):
        """Request body for placing an order"""
        item = {'product': product.id, 'quantity': quantity}
        if variant_id:
            item['variant'] = {'id': variant_id}
        address = {'name': 'Test User', 'address': '12 MG Road', 'city': 'Bengaluru', 'pin_code': '560001'}
        return {
            'items': [item],
            'shipping_address': address,
            'billing_address': address,
            'payment_method': 'cod',
        }


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()


class CacheClearingMixin:
    """Start every test with an empty cache so cached listings never leak between tests"""

    def setUp(self):
        cache.clear()
        super().setUp()
