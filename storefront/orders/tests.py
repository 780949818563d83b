"""
Test suite for the orders module
Tests: Checkout, Totals, Stock reservation, Listing, Cancellation, Returns, Tracking, Admin status changes
"""
from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from storefront.core.models import AuditLog
from storefront.core.test_utils import TestDataFactory, AuthenticatedAPIClient, CacheClearingMixin
from storefront.orders.models import Order
from storefront.orders.services import calculate_totals


class OrderTotalsTests(TestCase):
    """Test tax and shipping calculation"""

    def test_free_shipping_above_threshold(self):
        tax, shipping, total = calculate_totals(Decimal('100.00'))
        self.assertEqual(tax, Decimal('8.00'))
        self.assertEqual(shipping, Decimal('0.00'))
        self.assertEqual(total, Decimal('108.00'))

    def test_shipping_fee_at_threshold(self):
        tax, shipping, total = calculate_totals(Decimal('50.00'))
        self.assertEqual(shipping, Decimal('5.99'))
        self.assertEqual(total, Decimal('59.99'))

    def test_tax_rounding(self):
        tax, shipping, total = calculate_totals(Decimal('19.99'))
        self.assertEqual(tax, Decimal('1.60'))
        self.assertEqual(total, Decimal('27.58'))


class CheckoutTests(CacheClearingMixin, TestCase):
    """Test placing orders"""

    def setUp(self):
        super().setUp()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(name='Gold Whey', price=Decimal('100.00'), stock_quantity=10)

    def test_create_order(self):
        """Test an order takes stock and records totals and history"""
        payload = TestDataFactory.order_payload(self.product, quantity=2)
        response = self.client.post('/api/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Order created successfully')

        data = response.data['data']
        self.assertTrue(data['order_number'].startswith('ORD-'))
        self.assertEqual(data['subtotal'], '200.00')
        self.assertEqual(data['tax'], '16.00')
        self.assertEqual(data['shipping'], '0.00')
        self.assertEqual(data['total'], '216.00')
        self.assertEqual(data['status'], 'pending')
        self.assertEqual(data['items'][0]['name'], 'Gold Whey')
        self.assertEqual(data['status_history'][0]['note'], 'Order placed')

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 8)
        self.assertEqual(self.product.sales, 2)

    def test_create_order_updates_customer_stats(self):
        self.client.post('/api/orders/', TestDataFactory.order_payload(self.product), format='json')
        self.user.refresh_from_db()
        self.assertEqual(self.user.total_orders, 1)
        self.assertEqual(self.user.total_spent, Decimal('108.00'))
        self.assertIsNotNone(self.user.last_order_date)

    def test_guest_order(self):
        self.client.logout()
        response = self.client.post('/api/orders/', TestDataFactory.order_payload(self.product), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(Order.objects.get().user)

    def test_order_with_variant(self):
        variant = TestDataFactory.create_variant(self.product, variant_id='choc', price=Decimal('30.00'), stock_quantity=4)
        payload = TestDataFactory.order_payload(self.product, quantity=3, variant_id='choc')
        response = self.client.post('/api/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['subtotal'], '90.00')
        self.assertEqual(response.data['data']['items'][0]['variant']['id'], 'choc')

        variant.refresh_from_db()
        self.product.refresh_from_db()
        self.assertEqual(variant.stock_quantity, 1)
        self.assertEqual(self.product.stock_quantity, 10)

    def test_insufficient_stock_rolls_back(self):
        """Test a failing line leaves every product's stock untouched"""
        other = TestDataFactory.create_product(name='Creatine', stock_quantity=1)
        payload = TestDataFactory.order_payload(self.product, quantity=2)
        payload['items'].append({'product': other.id, 'quantity': 5})
        response = self.client.post('/api/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Product Creatine is out of stock or insufficient quantity')

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)
        self.assertEqual(Order.objects.count(), 0)

    def test_unknown_product(self):
        payload = TestDataFactory.order_payload(self.product)
        payload['items'][0]['product'] = 99999
        response = self.client.post('/api/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Product 99999 not found')

    def test_empty_items(self):
        payload = TestDataFactory.order_payload(self.product)
        payload['items'] = []
        response = self.client.post('/api/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Validation error')

    def test_missing_shipping_address(self):
        payload = TestDataFactory.order_payload(self.product)
        del payload['shipping_address']
        response = self.client.post('/api/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('shipping_address', response.data['errors'])


class CustomerOrderTests(CacheClearingMixin, TestCase):
    """Test a customer's view of their orders"""

    def setUp(self):
        super().setUp()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(stock_quantity=10)

    def test_list_requires_login(self):
        self.client.logout()
        response = self.client.get('/api/orders/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Not authorized, no token')

    def test_list_own_orders_only(self):
        TestDataFactory.create_order(user=self.user, product=self.product)
        TestDataFactory.create_order(user=TestDataFactory.create_user(), product=self.product)
        response = self.client.get('/api/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['total'], 1)
        self.assertEqual(response.data['pagination']['limit'], 10)

    def test_list_status_filter(self):
        TestDataFactory.create_order(user=self.user, product=self.product)
        TestDataFactory.create_order(user=self.user, product=self.product, status=Order.STATUS_DELIVERED)
        response = self.client.get('/api/orders/?status=delivered')
        self.assertEqual(len(response.data['data']), 1)
        response = self.client.get('/api/orders/?status=all')
        self.assertEqual(len(response.data['data']), 2)

    def test_detail_of_other_users_order(self):
        order = TestDataFactory.create_order(user=TestDataFactory.create_user(), product=self.product)
        response = self.client.get(f'/api/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Order not found')

    def test_cancel_restores_stock(self):
        """Test cancelling gives stock back"""
        response = self.client.post('/api/orders/', TestDataFactory.order_payload(self.product, quantity=3), format='json')
        order_id = response.data['data']['id']
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 7)

        response = self.client.put(f'/api/orders/{order_id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'cancelled')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)
        self.assertEqual(self.product.sales, 0)
        self.assertTrue(AuditLog.objects.filter(action='order_cancel').exists())

    def test_cancel_twice(self):
        order = TestDataFactory.create_order(user=self.user, product=self.product, status=Order.STATUS_CANCELLED)
        response = self.client.put(f'/api/orders/{order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Order is already cancelled')

    def test_cancel_shipped_order(self):
        order = TestDataFactory.create_order(user=self.user, product=self.product, status=Order.STATUS_SHIPPED)
        response = self.client.put(f'/api/orders/{order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Cannot cancel shipped or delivered order')

    def test_return_delivered_order(self):
        order = TestDataFactory.create_order(
            user=self.user, product=self.product, status=Order.STATUS_DELIVERED, delivered_at=timezone.now()
        )
        response = self.client.put(f'/api/orders/{order.id}/return/', {'reason': 'Wrong flavour'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_RETURNED)
        self.assertEqual(order.return_reason, 'Wrong flavour')
        self.assertEqual(order.status_history.last().note, 'Return requested: Wrong flavour')

    def test_return_requires_reason(self):
        order = TestDataFactory.create_order(
            user=self.user, product=self.product, status=Order.STATUS_DELIVERED, delivered_at=timezone.now()
        )
        response = self.client.put(f'/api/orders/{order.id}/return/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors']['reason'][0], 'Return reason is required')

    def test_return_undelivered_order(self):
        order = TestDataFactory.create_order(user=self.user, product=self.product)
        response = self.client.put(f'/api/orders/{order.id}/return/', {'reason': 'Changed mind'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Can only return delivered orders')

    def test_return_window_expired(self):
        order = TestDataFactory.create_order(
            user=self.user, product=self.product, status=Order.STATUS_DELIVERED,
            delivered_at=timezone.now() - timedelta(days=31)
        )
        response = self.client.put(f'/api/orders/{order.id}/return/', {'reason': 'Too late'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Returns must be requested within 30 days of delivery')

    def test_tracking(self):
        order = TestDataFactory.create_order(user=self.user, product=self.product, tracking_number='TRK123')
        response = self.client.get(f'/api/orders/{order.id}/tracking/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['order_number'], order.order_number)
        self.assertEqual(response.data['data']['tracking_number'], 'TRK123')
        self.assertEqual(len(response.data['data']['status_history']), 1)


class AdminOrderTests(CacheClearingMixin, TestCase):
    """Test admin order management"""

    def setUp(self):
        super().setUp()
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user(email='buyer@example.com', name='Asha Buyer')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.product = TestDataFactory.create_product(stock_quantity=10)

    def test_list_all_orders(self):
        TestDataFactory.create_order(user=self.customer, product=self.product)
        TestDataFactory.create_order(product=self.product, payment_status=Order.PAYMENT_PAID)
        response = self.client.get('/api/admin/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['total'], 2)

        response = self.client.get('/api/admin/orders/?payment_status=paid')
        self.assertEqual(response.data['pagination']['total'], 1)

    def test_search_by_customer(self):
        order = TestDataFactory.create_order(user=self.customer, product=self.product)
        TestDataFactory.create_order(product=self.product)
        response = self.client.get('/api/admin/orders/?search=asha')
        self.assertEqual([o['id'] for o in response.data['data']], [order.id])
        self.assertEqual(response.data['data'][0]['customer_email'], 'buyer@example.com')

    def test_customer_cannot_list_all_orders(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/admin/orders/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_status_with_tracking(self):
        """Test a status change appends history and writes an audit entry"""
        order = TestDataFactory.create_order(user=self.customer, product=self.product)
        data = {'status': 'shipped', 'tracking_number': 'BLUEDART-1', 'notes': 'Dispatched from Pune'}
        response = self.client.put(f'/api/admin/orders/{order.id}/status/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_SHIPPED)
        self.assertEqual(order.tracking_number, 'BLUEDART-1')
        self.assertEqual(order.status_history.last().note, 'Dispatched from Pune')
        self.assertEqual(order.status_history.last().changed_by, self.admin)
        log = AuditLog.objects.get(action='status_change')
        self.assertEqual(log.changes['status'], {'old': 'pending', 'new': 'shipped'})

    def test_delivered_sets_delivery_time(self):
        order = TestDataFactory.create_order(user=self.customer, product=self.product)
        self.client.put(f'/api/admin/orders/{order.id}/status/', {'status': 'delivered'}, format='json')
        order.refresh_from_db()
        self.assertIsNotNone(order.delivered_at)
        self.assertEqual(order.status_history.last().note, 'Status changed to delivered')

    def test_admin_cancel_restores_stock(self):
        order = TestDataFactory.create_order(user=self.customer, product=self.product, quantity=4)
        self.client.put(f'/api/admin/orders/{order.id}/status/', {'status': 'cancelled'}, format='json')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 14)

    def test_cancelled_order_cannot_be_reopened(self):
        """Test a cancelled order keeps its status and stock is restored only once"""
        self.client.authenticate_user(self.customer)
        response = self.client.post('/api/orders/', TestDataFactory.order_payload(self.product, quantity=4), format='json')
        order_id = response.data['data']['id']
        self.client.authenticate_user(self.admin)
        url = f'/api/admin/orders/{order_id}/status/'

        self.client.put(url, {'status': 'cancelled'}, format='json')
        response = self.client.put(url, {'status': 'pending'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Cannot change status of a cancelled order')

        self.client.put(url, {'status': 'cancelled'}, format='json')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)
        self.assertEqual(Order.objects.get(pk=order_id).status, Order.STATUS_CANCELLED)

    def test_update_payment_status(self):
        order = TestDataFactory.create_order(user=self.customer, product=self.product)
        data = {'status': 'confirmed', 'payment_status': 'paid'}
        self.client.put(f'/api/admin/orders/{order.id}/status/', data, format='json')
        order.refresh_from_db()
        self.assertEqual(order.payment_status, Order.PAYMENT_PAID)

    def test_invalid_status(self):
        order = TestDataFactory.create_order(user=self.customer, product=self.product)
        response = self.client.put(f'/api/admin/orders/{order.id}/status/', {'status': 'lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_unknown_order(self):
        response = self.client.put('/api/admin/orders/99999/status/', {'status': 'shipped'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class OrderCommandTests(TestCase):
    """Test order maintenance commands"""

    def test_assign_orders_to_user(self):
        user = TestDataFactory.create_user(email='testuser@example.com')
        product = TestDataFactory.create_product(price=Decimal('40.00'))
        TestDataFactory.create_order(product=product)
        TestDataFactory.create_order(product=product, quantity=2)
        TestDataFactory.create_order(product=product, status=Order.STATUS_CANCELLED)

        call_command('assign_orders_to_user', stdout=StringIO())
        user.refresh_from_db()
        self.assertEqual(Order.objects.filter(user=user).count(), 3)
        self.assertEqual(user.total_orders, 2)
        self.assertEqual(user.total_spent, Decimal('120.00'))
