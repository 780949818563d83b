"""
Test suite for the catalog module
Tests: Categories, Product browsing, Reviews, Admin product CRUD, Bulk operations, Seed and maintenance commands
"""
import tempfile
from decimal import Decimal
from io import StringIO
from pathlib import Path

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework import status

from storefront.catalog.models import Category, Product, ProductVariant
from storefront.catalog.seed_data import CATEGORIES, PRODUCT_GROUPS
from storefront.catalog.utils import get_prefix_for_product, seo_slug, parse_tags
from storefront.core.models import AuditLog
from storefront.core.test_utils import TestDataFactory, AuthenticatedAPIClient, CacheClearingMixin


class CategoryTests(CacheClearingMixin, TestCase):
    """Test public and admin category endpoints"""

    def setUp(self):
        super().setUp()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.protein = TestDataFactory.create_category(name='Protein')
        self.hidden = TestDataFactory.create_category(name='Hidden', is_active=False)
        TestDataFactory.create_product(category=self.protein)

    def test_list_categories(self):
        """Test only active categories are listed, with product counts"""
        response = self.client.get('/api/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['data'][0]['name'], 'Protein')
        self.assertEqual(response.data['data'][0]['product_count'], 1)

    def test_category_detail_by_id_and_slug(self):
        response = self.client.get(f'/api/categories/{self.protein.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get('/api/categories/protein/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['id'], self.protein.id)

    def test_category_not_found(self):
        response = self.client.get('/api/categories/no-such-category/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Category not found')

    def test_admin_list_includes_inactive(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/admin/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

    def test_create_category(self):
        """Test creating a category generates its slug"""
        self.client.authenticate_user(self.admin)
        data = {'name': 'Amino Acids', 'description': 'BCAAs and EAAs'}
        response = self.client.post('/api/admin/categories/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['slug'], 'amino-acids')
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Category').exists())

    def test_create_duplicate_name_case_insensitive(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/admin/categories/', {'name': 'PROTEIN'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Category with this name already exists')

    def test_create_category_requires_admin(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post('/api/admin/categories/', {'name': 'Snacks'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_category_renames_slug(self):
        self.client.authenticate_user(self.admin)
        response = self.client.put(f'/api/admin/categories/{self.protein.id}/', {'name': 'Whey Protein'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.protein.refresh_from_db()
        self.assertEqual(self.protein.slug, 'whey-protein')

    def test_category_cannot_be_own_parent(self):
        self.client.authenticate_user(self.admin)
        response = self.client.put(
            f'/api/admin/categories/{self.protein.id}/', {'parent_id': self.protein.id}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_category_with_children(self):
        TestDataFactory.create_category(name='Isolate', parent=self.protein)
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/admin/categories/{self.protein.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Category.objects.filter(pk=self.protein.pk).exists())

    def test_delete_category(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/admin/categories/{self.hidden.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Category.objects.filter(pk=self.hidden.pk).exists())


class ProductBrowsingTests(CacheClearingMixin, TestCase):
    """Test public product endpoints"""

    def setUp(self):
        super().setUp()
        self.client = AuthenticatedAPIClient()
        self.protein = TestDataFactory.create_category(name='Protein')
        self.vitamins = TestDataFactory.create_category(name='Vitamins')
        self.whey = TestDataFactory.create_product(
            name='Gold Whey', price=Decimal('59.99'), original_price=Decimal('79.99'),
            category=self.protein, brand='Optimum', tags=['whey', 'protein'], featured=True
        )
        self.casein = TestDataFactory.create_product(name='Night Casein', price=Decimal('44.50'), category=self.protein)
        self.multi = TestDataFactory.create_product(
            name='Daily Multi', price=Decimal('15.00'), category=self.vitamins, stock_quantity=0
        )

    def test_list_products(self):
        response = self.client.get('/api/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['pagination']['total'], 3)
        self.assertEqual(response.data['pagination']['limit'], 12)

    def test_filter_by_category_slug(self):
        response = self.client.get('/api/products/?category=protein')
        self.assertEqual(response.data['pagination']['total'], 2)

    def test_filter_by_price_range(self):
        response = self.client.get('/api/products/?min_price=20&max_price=50')
        names = [product['name'] for product in response.data['data']]
        self.assertEqual(names, ['Night Casein'])

    def test_filter_in_stock_and_featured(self):
        response = self.client.get('/api/products/?in_stock=false')
        self.assertEqual([p['name'] for p in response.data['data']], ['Daily Multi'])
        response = self.client.get('/api/products/?featured=true')
        self.assertEqual([p['name'] for p in response.data['data']], ['Gold Whey'])

    def test_search(self):
        response = self.client.get('/api/products/?search=optimum')
        self.assertEqual([p['name'] for p in response.data['data']], ['Gold Whey'])

    def test_sort_by_price(self):
        response = self.client.get('/api/products/?sort=price_asc')
        prices = [p['price'] for p in response.data['data']]
        self.assertEqual(prices, ['15.00', '44.50', '59.99'])

    def test_pagination(self):
        response = self.client.get('/api/products/?sort=name&limit=2&page=2')
        pagination = response.data['pagination']
        self.assertEqual(pagination['pages'], 2)
        self.assertFalse(pagination['has_next'])
        self.assertTrue(pagination['has_prev'])
        self.assertEqual([p['name'] for p in response.data['data']], ['Night Casein'])

    def test_invalid_filter_value(self):
        response = self.client.get('/api/products/?min_price=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Validation error')

    def test_listing_cache_refreshes_after_product_change(self):
        """Test cached listings are invalidated when products change"""
        self.client.get('/api/products/')
        TestDataFactory.create_product(name='Creatine Mono', category=self.vitamins)
        response = self.client.get('/api/products/')
        self.assertEqual(response.data['pagination']['total'], 4)

    def test_derived_pricing_fields(self):
        response = self.client.get('/api/products/?featured=true')
        product = response.data['data'][0]
        self.assertEqual(product['discount_percentage'], 25)
        self.assertTrue(product['is_on_sale'])

    def test_product_detail_counts_views(self):
        TestDataFactory.create_variant(self.whey)
        response = self.client.get(f'/api/products/{self.whey.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['views'], 1)
        self.assertEqual(response.data['data']['variants'][0]['id'], 'variant-0')
        self.whey.refresh_from_db()
        self.assertEqual(self.whey.views, 1)

    def test_product_detail_not_found(self):
        response = self.client.get('/api/products/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Product not found')

    def test_generated_sku_and_seo_url(self):
        self.assertTrue(self.whey.sku.startswith('PRO-'))
        self.assertEqual(self.whey.seo_url, 'gold-whey')
        duplicate = TestDataFactory.create_product(name='Gold Whey')
        self.assertEqual(duplicate.seo_url, 'gold-whey-2')


class ReviewTests(CacheClearingMixin, TestCase):
    """Test product reviews"""

    def setUp(self):
        super().setUp()
        self.product = TestDataFactory.create_product()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_add_review_updates_rating(self):
        TestDataFactory.create_review(self.product, TestDataFactory.create_user(), rating=4)
        response = self.client.post(
            f'/api/products/{self.product.id}/reviews/', {'rating': 5, 'comment': 'Mixes well'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.rating, Decimal('4.5'))
        self.assertEqual(self.product.review_count, 2)

    def test_review_once_per_user(self):
        TestDataFactory.create_review(self.product, self.user)
        response = self.client.post(f'/api/products/{self.product.id}/reviews/', {'rating': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Product already reviewed')

    def test_review_rating_range(self):
        response = self.client.post(f'/api/products/{self.product.id}/reviews/', {'rating': 6}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_review_requires_login(self):
        self.client.logout()
        response = self.client.post(f'/api/products/{self.product.id}/reviews/', {'rating': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class AdminProductTests(CacheClearingMixin, TestCase):
    """Test admin product management"""

    def setUp(self):
        super().setUp()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.category = TestDataFactory.create_category(name='Whey Protein')
        self.product = TestDataFactory.create_product(name='Iso Whey', category=self.category, stock_quantity=20)

    def test_create_product(self):
        """Test creating a product with variants and comma separated tags"""
        data = {
            'name': 'Clear Whey',
            'description': 'Refreshing whey isolate',
            'price': '49.99',
            'stock_quantity': 15,
            'category': 'Whey Protein',
            'tags': 'whey, isolate',
            'variants': [{'name': '1kg', 'price': '59.99', 'stock_quantity': 3}],
        }
        response = self.client.post('/api/admin/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product = Product.objects.get(name='Clear Whey')
        self.assertEqual(product.category, self.category)
        self.assertEqual(product.tags, ['whey', 'isolate'])
        self.assertTrue(product.in_stock)
        self.assertTrue(product.sku.startswith('WHE-'))
        self.assertEqual(response.data['data']['variants'][0]['id'], 'variant-0')

    def test_create_product_unknown_category(self):
        data = {'name': 'Clear Whey', 'description': 'x', 'price': '49.99', 'category': 'Nope'}
        response = self.client.post('/api/admin/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('category', response.data['errors'])

    def test_create_product_invalid_variants(self):
        data = {'name': 'Clear Whey', 'description': 'x', 'price': '49.99', 'variants': '{not json'}
        response = self.client.post('/api/admin/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid variants format')

    def test_create_product_duplicate_variant_ids(self):
        """Test an explicit variant id that collides with a generated one is rejected"""
        data = {
            'name': 'Clear Whey', 'description': 'x', 'price': '49.99',
            'variants': [{'name': 'A', 'price': '10.00'}, {'id': 'variant-0', 'name': 'B', 'price': '12.00'}],
        }
        response = self.client.post('/api/admin/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors']['variants_input'], ['Duplicate variant id "variant-0"'])
        self.assertFalse(Product.objects.filter(name='Clear Whey').exists())

    def test_update_duplicate_variant_ids(self):
        data = {'variants': [
            {'id': 'choc', 'name': 'Chocolate', 'price': '65.00'},
            {'id': 'choc', 'name': 'Chocolate 2kg', 'price': '95.00'},
        ]}
        response = self.client.put(f'/api/admin/products/{self.product.id}/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_product_rejects_non_image_upload(self):
        data = {
            'name': 'Clear Whey', 'description': 'x', 'price': '49.99',
            'images': SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain'),
        }
        response = self.client.post('/api/admin/products/', data, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Only image files are allowed')

    def test_admin_list_sorted(self):
        TestDataFactory.create_product(name='Budget Whey', price=Decimal('10.00'))
        response = self.client.get('/api/admin/products/?sort_by=price&sort_order=asc')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'][0]['name'], 'Budget Whey')
        self.assertEqual(response.data['pagination']['limit'], 20)

    def test_admin_search_by_sku(self):
        response = self.client.get(f'/api/admin/products/?search={self.product.sku}')
        self.assertEqual(len(response.data['data']), 1)

    def test_update_product(self):
        response = self.client.patch(
            f'/api/admin/products/{self.product.id}/', {'price': '79.99', 'stock_quantity': 0}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.price, Decimal('79.99'))
        self.assertFalse(self.product.in_stock)

    def test_update_replaces_variants(self):
        TestDataFactory.create_variant(self.product, variant_id='old')
        data = {'variants': [{'id': 'choc', 'name': 'Chocolate', 'price': '65.00', 'stock_quantity': 2}]}
        response = self.client.put(f'/api/admin/products/{self.product.id}/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(list(self.product.variants.values_list('variant_id', flat=True)), ['choc'])

    def test_delete_product(self):
        response = self.client.delete(f'/api/admin/products/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Product.objects.filter(pk=self.product.pk).exists())
        self.assertTrue(AuditLog.objects.filter(action='delete', model_name='Product').exists())

    def test_bulk_update_stock(self):
        other = TestDataFactory.create_product(stock_quantity=0)
        data = {'updates': [
            {'product_id': self.product.id, 'stock_quantity': 0},
            {'product_id': other.id, 'stock_quantity': 12},
        ]}
        response = self.client.put('/api/admin/products/bulk-stock/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['modified_count'], 2)
        self.product.refresh_from_db()
        other.refresh_from_db()
        self.assertFalse(self.product.in_stock)
        self.assertTrue(other.in_stock)
        self.assertEqual(other.stock_quantity, 12)

    def test_bulk_update_stock_unknown_product(self):
        data = {'updates': [{'product_id': 99999, 'stock_quantity': 5}]}
        response = self.client.put('/api/admin/products/bulk-stock/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Product with ID 99999 not found')

    def test_bulk_update_stock_negative(self):
        data = {'updates': [{'product_id': self.product.id, 'stock_quantity': -1}]}
        response = self.client.put('/api/admin/products/bulk-stock/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 20)

    def test_bulk_update_featured(self):
        data = {'updates': [{'product_id': self.product.id, 'featured': True}]}
        response = self.client.put('/api/admin/products/bulk-featured/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertTrue(self.product.featured)

    def test_bulk_update_featured_string_flag(self):
        """Test string flags from form posts are parsed rather than truth-tested"""
        self.product.featured = True
        self.product.save()
        data = {'updates': [{'product_id': self.product.id, 'featured': 'false'}]}
        response = self.client.put('/api/admin/products/bulk-featured/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertFalse(self.product.featured)

    def test_bulk_update_featured_missing_flag(self):
        data = {'updates': [{'product_id': self.product.id}]}
        response = self.client.put('/api/admin/products/bulk-featured/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Featured status is required')

    def test_bulk_delete(self):
        other = TestDataFactory.create_product()
        data = {'product_ids': [self.product.id, other.id]}
        response = self.client.delete('/api/admin/products/bulk/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['deleted_count'], 2)
        self.assertEqual(Product.objects.count(), 0)

    def test_bulk_delete_requires_ids(self):
        response = self.client.delete('/api/admin/products/bulk/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Product IDs array is required')


class CatalogUtilsTests(TestCase):
    """Test SKU and slug helpers"""

    def test_sku_prefix(self):
        self.assertEqual(get_prefix_for_product('Pre-Workout', 'Blast'), 'PRE')
        self.assertEqual(get_prefix_for_product(None, 'Creatine'), 'CRE')
        self.assertEqual(get_prefix_for_product('', 'X'), 'BBN')

    def test_seo_slug(self):
        self.assertEqual(seo_slug('Omega-3 Fish Oil (1000mg)'), 'omega-3-fish-oil-1000mg')

    def test_parse_tags(self):
        self.assertEqual(parse_tags('whey, protein ,'), ['whey', 'protein'])
        self.assertEqual(parse_tags(['a', ' ']), ['a'])
        self.assertIsNone(parse_tags(None))


class CatalogCommandTests(CacheClearingMixin, TestCase):
    """Test seed and maintenance commands"""

    def test_seed_categories(self):
        call_command('seed_categories', stdout=StringIO())
        self.assertEqual(Category.objects.count(), len(CATEGORIES))
        call_command('seed_categories', stdout=StringIO())
        self.assertEqual(Category.objects.count(), len(CATEGORIES))

    def test_seed_products_group(self):
        call_command('seed_products', group='whey', stdout=StringIO())
        self.assertEqual(Product.objects.count(), len(PRODUCT_GROUPS['whey']))
        self.assertTrue(all(product.category_id for product in Product.objects.all()))

        out = StringIO()
        call_command('seed_products', group='whey', stdout=out)
        self.assertEqual(Product.objects.count(), len(PRODUCT_GROUPS['whey']))
        self.assertIn('0 products created', out.getvalue())

    def test_fix_invalid_images(self):
        with tempfile.TemporaryDirectory() as public_dir:
            image_dir = Path(public_dir) / 'images' / 'products'
            image_dir.mkdir(parents=True)
            (image_dir / 'whey.png').write_bytes(b'png')

            product = TestDataFactory.create_product(images=[
                '/images/products/whey.png',
                '/images/products/missing.png',
                'https://cdn.example.com/whey.png',
            ])
            with override_settings(STOREFRONT_PUBLIC_DIR=Path(public_dir)):
                call_command('fix_invalid_images', dry_run=True, stdout=StringIO())
                product.refresh_from_db()
                self.assertIn('/images/products/missing.png', product.images)

                call_command('fix_invalid_images', stdout=StringIO())

        product.refresh_from_db()
        self.assertEqual(product.images, [
            '/images/products/whey.png',
            '/images/products/alternative.png',
            'https://cdn.example.com/whey.png',
        ])

    def test_convert_prices_to_inr(self):
        product = TestDataFactory.create_product(name='Custom Blend', price=Decimal('2.00'))
        variant = TestDataFactory.create_variant(product, price=Decimal('3.00'))
        call_command('convert_prices_to_inr', stdout=StringIO())
        product.refresh_from_db()
        variant.refresh_from_db()
        self.assertEqual(product.price, Decimal('166.00'))
        self.assertEqual(variant.price, Decimal('249.00'))

    def test_convert_prices_dry_run(self):
        product = TestDataFactory.create_product(name='Custom Blend', price=Decimal('2.00'))
        call_command('convert_prices_to_inr', dry_run=True, stdout=StringIO())
        product.refresh_from_db()
        self.assertEqual(product.price, Decimal('2.00'))

    def test_list_and_check_products(self):
        TestDataFactory.create_product(name='Plain Product', images=[])
        out = StringIO()
        call_command('list_products', stdout=out)
        self.assertIn('Plain Product', out.getvalue())

        out = StringIO()
        call_command('check_product_images', stdout=out)
        self.assertIn('no images', out.getvalue())
