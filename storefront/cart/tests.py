"""
Test suite for the cart module
Tests: Add, Update, Remove, Clear, Sync, Stats, Stale cart cleanup, Wishlist restock monitor
"""
from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core import mail
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from storefront.cart import services
from storefront.cart.models import Cart, CartItem
from storefront.core.models import WishlistItem
from storefront.core.test_utils import TestDataFactory, AuthenticatedAPIClient, CacheClearingMixin


class CartTests(CacheClearingMixin, TestCase):
    """Test cart endpoints"""

    def setUp(self):
        super().setUp()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(name='Gold Whey', price=Decimal('50.00'), stock_quantity=5)
        self.variant = TestDataFactory.create_variant(self.product, variant_id='2kg', name='2kg', price=Decimal('90.00'), stock_quantity=3)

    def test_get_empty_cart(self):
        response = self.client.get('/api/cart/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['items'], [])
        self.assertEqual(response.data['data']['total_value'], '0.00')

    def test_cart_requires_login(self):
        self.client.logout()
        response = self.client.get('/api/cart/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_add_item(self):
        """Test adding an item captures name and price"""
        response = self.client.post('/api/cart/add/', {'product_id': self.product.id, 'quantity': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Item added to cart')
        item = response.data['data']['items'][0]
        self.assertEqual(item['product_name'], 'Gold Whey')
        self.assertEqual(item['price'], '50.00')
        self.assertEqual(response.data['data']['total_value'], '100.00')

    def test_add_same_item_increments(self):
        self.client.post('/api/cart/add/', {'product_id': self.product.id, 'quantity': 2}, format='json')
        self.client.post('/api/cart/add/', {'product_id': self.product.id, 'quantity': 1}, format='json')
        self.assertEqual(CartItem.objects.count(), 1)
        self.assertEqual(CartItem.objects.get().quantity, 3)

    def test_add_variant_is_separate_line(self):
        self.client.post('/api/cart/add/', {'product_id': self.product.id}, format='json')
        response = self.client.post(
            '/api/cart/add/', {'product_id': self.product.id, 'variant_id': '2kg'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(CartItem.objects.count(), 2)
        line = CartItem.objects.get(variant_id='2kg')
        self.assertEqual(line.price, Decimal('90.00'))
        self.assertEqual(line.variant_name, '2kg')

    def test_add_more_than_stock(self):
        response = self.client.post('/api/cart/add/', {'product_id': self.product.id, 'quantity': 6}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Only 5 items available in stock')

    def test_increment_beyond_stock(self):
        self.client.post('/api/cart/add/', {'product_id': self.product.id, 'quantity': 4}, format='json')
        response = self.client.post('/api/cart/add/', {'product_id': self.product.id, 'quantity': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Cannot add 2 more items. Only 1 more available')

    def test_add_unknown_product(self):
        response = self.client.post('/api/cart/add/', {'product_id': 99999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Product not found')

    def test_add_unknown_variant(self):
        response = self.client.post(
            '/api/cart/add/', {'product_id': self.product.id, 'variant_id': '5kg'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Variant not found')

    def test_add_invalid_quantity(self):
        response = self.client.post('/api/cart/add/', {'product_id': self.product.id, 'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_quantity(self):
        services.add_item(self.user, self.product.id, 1)
        response = self.client.put('/api/cart/update/', {'product_id': self.product.id, 'quantity': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(CartItem.objects.get().quantity, 4)

    def test_update_to_zero_removes_line(self):
        services.add_item(self.user, self.product.id, 1)
        response = self.client.put('/api/cart/update/', {'product_id': self.product.id, 'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['items'], [])

    def test_update_missing_item(self):
        response = self.client.put('/api/cart/update/', {'product_id': self.product.id, 'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Item not found in cart')

    def test_update_beyond_stock(self):
        services.add_item(self.user, self.product.id, 1, '2kg')
        data = {'product_id': self.product.id, 'variant_id': '2kg', 'quantity': 4}
        response = self.client.put('/api/cart/update/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Only 3 items available in stock')

    def test_remove_single_variant(self):
        services.add_item(self.user, self.product.id, 1)
        services.add_item(self.user, self.product.id, 1, '2kg')
        data = {'product_id': self.product.id, 'variant_id': '2kg'}
        response = self.client.delete('/api/cart/remove/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(list(CartItem.objects.values_list('variant_id', flat=True)), [''])

    def test_remove_all_lines_of_product(self):
        services.add_item(self.user, self.product.id, 1)
        services.add_item(self.user, self.product.id, 1, '2kg')
        response = self.client.delete(f'/api/cart/remove/?product_id={self.product.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(CartItem.objects.count(), 0)

    def test_clear_cart(self):
        services.add_item(self.user, self.product.id, 2)
        response = self.client.delete('/api/cart/clear/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Cart cleared')
        self.assertEqual(CartItem.objects.count(), 0)
        self.assertTrue(Cart.objects.filter(user=self.user).exists())

    def test_sync_replaces_cart(self):
        """Test sync keeps valid items and reports failures"""
        services.add_item(self.user, self.product.id, 1)
        other = TestDataFactory.create_product(name='Creatine', stock_quantity=1)
        data = {'items': [
            {'product_id': self.product.id, 'quantity': 2, 'variant_id': '2kg'},
            {'product_id': other.id, 'quantity': 5},
            {'quantity': 1},
        ]}
        response = self.client.post('/api/cart/sync/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        results = response.data['data']['sync_results']
        self.assertEqual(len(results['success']), 1)
        self.assertEqual(len(results['failed']), 2)
        self.assertEqual(results['failed'][0]['error'], 'Only 1 items available in stock')
        self.assertEqual(list(CartItem.objects.values_list('variant_id', 'quantity')), [('2kg', 2)])

    def test_stats(self):
        services.add_item(self.user, self.product.id, 2)
        services.add_item(self.user, self.product.id, 1, '2kg')
        response = self.client.get('/api/cart/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['item_count'], 2)
        self.assertEqual(response.data['data']['total_items'], 3)
        self.assertEqual(response.data['data']['total_value'], '190.00')

    def test_stats_without_cart(self):
        response = self.client.get('/api/cart/stats/')
        self.assertEqual(response.data['data']['item_count'], 0)
        self.assertIsNone(response.data['data']['last_updated'])


class CartMaintenanceTests(TestCase):
    """Test stale cart cleanup"""

    def test_cleanup_old_carts(self):
        fresh = Cart.objects.create(user=TestDataFactory.create_user())
        stale = Cart.objects.create(user=TestDataFactory.create_user())
        Cart.objects.filter(pk=stale.pk).update(updated_at=timezone.now() - timedelta(hours=30))

        self.assertEqual(services.cleanup_old_carts(24), 1)
        self.assertTrue(Cart.objects.filter(pk=fresh.pk).exists())
        self.assertFalse(Cart.objects.filter(pk=stale.pk).exists())

    def test_cleanup_command(self):
        stale = Cart.objects.create(user=TestDataFactory.create_user())
        Cart.objects.filter(pk=stale.pk).update(updated_at=timezone.now() - timedelta(hours=5))
        out = StringIO()
        call_command('cleanup_carts', max_age_hours=4, stdout=out)
        self.assertIn('Deleted 1 carts', out.getvalue())


class WishlistRestockTests(TestCase):
    """Test the wishlist restock monitor"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(name='Pre Blast', stock_quantity=0)

    def _restock(self, quantity=10):
        self.product.stock_quantity = quantity
        self.product.sync_stock_flag()
        self.product.save()

    def test_restock_adds_to_cart_and_notifies(self):
        TestDataFactory.create_wishlist_item(self.user, self.product, auto_add_to_cart=True, was_out_of_stock=True)
        self._restock()

        summary = services.process_wishlist_restocks()
        self.assertEqual(summary['restocked'], 1)
        self.assertEqual(summary['added_to_cart'], 1)
        self.assertEqual(summary['notified'], 1)
        self.assertFalse(WishlistItem.objects.exists())
        self.assertEqual(CartItem.objects.get(cart__user=self.user).product, self.product)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('back in stock', mail.outbox[0].subject)

    def test_restock_without_auto_add_keeps_item(self):
        TestDataFactory.create_wishlist_item(
            self.user, self.product, notify_on_restock=False, was_out_of_stock=True
        )
        self._restock()

        summary = services.process_wishlist_restocks()
        self.assertEqual(summary['restocked'], 1)
        self.assertEqual(summary['notified'], 0)
        item = WishlistItem.objects.get()
        self.assertFalse(item.was_out_of_stock)
        self.assertFalse(CartItem.objects.exists())

    def test_sold_out_items_are_flagged(self):
        TestDataFactory.create_wishlist_item(self.user, self.product)
        summary = services.process_wishlist_restocks()
        self.assertEqual(summary['flagged'], 1)
        self.assertTrue(WishlistItem.objects.get().was_out_of_stock)

    def test_monitor_command_single_run(self):
        TestDataFactory.create_wishlist_item(self.user, self.product, was_out_of_stock=True)
        self._restock()
        out = StringIO()
        call_command('monitor_wishlist_stock', stdout=out)
        self.assertIn('Restocked: 1', out.getvalue())
