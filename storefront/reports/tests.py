"""
Test suite for admin reports
Tests: Dashboard stats, Recent orders, Top products, Monthly revenue, Product analytics
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from storefront.core.test_utils import TestDataFactory, AuthenticatedAPIClient, CacheClearingMixin
from storefront.orders.models import Order


class DashboardTests(CacheClearingMixin, TestCase):
    """Test the admin dashboard"""

    def setUp(self):
        super().setUp()
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.whey = TestDataFactory.create_product(name='Gold Whey', price=Decimal('100.00'))
        self.creatine = TestDataFactory.create_product(name='Creatine', price=Decimal('25.00'))

    def test_dashboard_stats(self):
        """Test totals count only customers and paid revenue"""
        TestDataFactory.create_order(user=self.customer, product=self.whey, quantity=2, payment_status=Order.PAYMENT_PAID)
        TestDataFactory.create_order(user=self.customer, product=self.creatine)

        response = self.client.get('/api/admin/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        stats = response.data['data']['stats']
        self.assertEqual(stats['total_products'], 2)
        self.assertEqual(stats['total_orders'], 2)
        self.assertEqual(stats['total_users'], 1)
        self.assertEqual(stats['total_revenue'], '200.00')

    def test_recent_orders_and_top_products(self):
        TestDataFactory.create_order(user=self.customer, product=self.whey, quantity=1)
        TestDataFactory.create_order(user=self.customer, product=self.creatine, quantity=5)

        data = self.client.get('/api/admin/dashboard/').data['data']
        self.assertEqual(len(data['recent_orders']), 2)
        self.assertEqual(data['top_products'][0]['name'], 'Creatine')
        self.assertEqual(data['top_products'][0]['total_sold'], 5)
        self.assertEqual(data['top_products'][0]['total_revenue'], '125.00')

    def test_monthly_revenue(self):
        TestDataFactory.create_order(product=self.whey, payment_status=Order.PAYMENT_PAID)
        TestDataFactory.create_order(product=self.creatine, payment_status=Order.PAYMENT_PAID)
        TestDataFactory.create_order(product=self.creatine)

        monthly = self.client.get('/api/admin/dashboard/').data['data']['monthly_revenue']
        self.assertEqual(len(monthly), 1)
        self.assertEqual(monthly[0]['revenue'], '125.00')
        self.assertEqual(monthly[0]['orders'], 2)

    def test_dashboard_refreshes_after_new_order(self):
        self.client.get('/api/admin/dashboard/')
        TestDataFactory.create_order(user=self.customer, product=self.whey)
        response = self.client.get('/api/admin/dashboard/')
        self.assertEqual(response.data['data']['stats']['total_orders'], 1)

    def test_dashboard_requires_admin(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/admin/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ProductAnalyticsTests(CacheClearingMixin, TestCase):
    """Test the product analytics report"""

    def setUp(self):
        super().setUp()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.protein = TestDataFactory.create_category(name='Protein')
        self.whey = TestDataFactory.create_product(name='Gold Whey', category=self.protein, stock_quantity=50)
        self.casein = TestDataFactory.create_product(name='Casein', category=self.protein, stock_quantity=3)
        self.multi = TestDataFactory.create_product(name='Daily Multi', stock_quantity=0, price=Decimal('15.00'))

    def test_stock_alerts(self):
        response = self.client.get('/api/admin/products/analytics/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual([p['name'] for p in data['low_stock_products']], ['Daily Multi', 'Casein'])
        self.assertEqual([p['name'] for p in data['out_of_stock_products']], ['Daily Multi'])

    def test_category_distribution(self):
        data = self.client.get('/api/admin/products/analytics/').data['data']
        distribution = {row['category']: row for row in data['category_distribution']}
        self.assertEqual(distribution['Protein']['count'], 2)
        self.assertEqual(distribution['Protein']['total_value'], '200.00')
        self.assertEqual(distribution['Uncategorized']['count'], 1)

    def test_top_selling_products(self):
        TestDataFactory.create_order(product=self.whey, quantity=2)
        TestDataFactory.create_order(product=self.casein, quantity=1)
        data = self.client.get('/api/admin/products/analytics/').data['data']
        self.assertEqual([p['name'] for p in data['top_selling_products']], ['Gold Whey', 'Casein'])
