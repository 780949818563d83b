"""
Test suite for accounts and platform endpoints
Tests: Registration, Login, Tokens, Profile, Password reset, Addresses, Wishlist, Admin users, Envelope errors
"""
import re
from datetime import timedelta
from io import StringIO

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken

from storefront.core.cache_utils import make_cache_key, invalidate_cache_pattern, PRODUCTS_LIST_PREFIX
from storefront.core.models import Address, WishlistItem, AuditLog
from storefront.core.test_utils import (
    TestDataFactory, AuthenticatedAPIClient, CacheClearingMixin, DEFAULT_PASSWORD
)
from storefront.core.utils import slugify_name, first_error_message

User = get_user_model()


class PlatformTests(CacheClearingMixin, TestCase):
    """Test index, health and error envelopes"""

    def setUp(self):
        super().setUp()
        self.client = AuthenticatedAPIClient()

    def test_health(self):
        """Test health endpoint"""
        response = self.client.get('/api/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['status'], 'OK')

    def test_api_index_lists_endpoints(self):
        response = self.client.get('/api/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('products', response.data['endpoints'])

    def test_api_docs(self):
        response = self.client.get('/api/docs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('cart', response.data['endpoints'])

    def test_unknown_route(self):
        """Test unknown API routes return the error envelope"""
        response = self.client.get('/api/does-not-exist/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['message'], 'Route not found')

    def test_missing_token(self):
        """Test protected endpoints without a token"""
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Not authorized, no token')

    def test_non_admin_on_admin_route(self):
        """Test customers are refused on admin routes"""
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/admin/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['message'], 'Not authorized as an admin')


class AuthTests(CacheClearingMixin, TestCase):
    """Test registration, login and account endpoints"""

    def setUp(self):
        super().setUp()
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(email='jane@example.com', name='Jane Doe')

    def test_register(self):
        """Test registering a new account"""
        data = {'name': 'New User', 'email': 'New@Example.com', 'password': 'Strong123!'}
        response = self.client.post('/api/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertIn('token', response.data['data'])
        self.assertEqual(response.data['data']['user']['email'], 'new@example.com')
        user = User.objects.get(email='new@example.com')
        self.assertEqual(user.role, User.ROLE_USER)
        self.assertFalse(user.email_verified)
        self.assertIsNotNone(user.email_verification_token)
        self.assertEqual(len(mail.outbox), 1)

    def test_register_weak_password(self):
        data = {'name': 'New User', 'email': 'weak@example.com', 'password': 'password'}
        response = self.client.post('/api/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Validation error')
        self.assertIn('password', response.data['errors'])

    def test_register_existing_verified_email(self):
        self.user.email_verified = True
        self.user.save()
        data = {'name': 'Jane Again', 'email': 'jane@example.com', 'password': 'Strong123!'}
        response = self.client.post('/api/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_register_existing_unverified_email(self):
        data = {'name': 'Jane Again', 'email': 'jane@example.com', 'password': 'Strong123!'}
        response = self.client.post('/api/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['data']['requires_verification'])

    def test_login(self):
        """Test logging in with email and password"""
        data = {'email': 'JANE@example.com', 'password': DEFAULT_PASSWORD}
        response = self.client.post('/api/auth/login/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('token', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['email'], 'jane@example.com')

    def test_login_invalid_credentials(self):
        data = {'email': 'jane@example.com', 'password': 'Wrong123!'}
        response = self.client.post('/api/auth/login/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Invalid credentials')

    def test_refresh_token(self):
        refresh = RefreshToken.for_user(self.user)
        response = self.client.post('/api/auth/refresh/', {'refresh': str(refresh)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('token', response.data['data'])

    def test_refresh_token_invalid(self):
        response = self.client.post('/api/auth/refresh/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

    def test_me(self):
        """Test fetching the current user with addresses and wishlist"""
        TestDataFactory.create_address(self.user, is_default=True)
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['email'], 'jane@example.com')
        self.assertEqual(len(response.data['data']['addresses']), 1)
        self.assertEqual(response.data['data']['wishlist'], [])

    def test_logout(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/auth/logout/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_update_profile_merges_preferences(self):
        self.client.authenticate_user(self.user)
        data = {'name': 'Jane Smith', 'preferences': {'currency': 'USD'}}
        response = self.client.put('/api/auth/profile/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.name, 'Jane Smith')
        self.assertEqual(self.user.preferences['currency'], 'USD')
        self.assertEqual(self.user.preferences['language'], 'en')

    def test_update_profile_invalid_currency(self):
        self.client.authenticate_user(self.user)
        response = self.client.put('/api/auth/profile/', {'preferences': {'currency': 'GBP'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_change_password(self):
        self.client.authenticate_user(self.user)
        data = {'current_password': DEFAULT_PASSWORD, 'new_password': 'Changed123!'}
        response = self.client.put('/api/auth/password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Changed123!'))

    def test_change_password_wrong_current(self):
        self.client.authenticate_user(self.user)
        data = {'current_password': 'Wrong123!', 'new_password': 'Changed123!'}
        response = self.client.put('/api/auth/password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Current password is incorrect')

    def test_forgot_and_reset_password(self):
        """Test the mailed reset token sets a new password"""
        response = self.client.post('/api/auth/forgot-password/', {'email': 'jane@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 1)

        token = re.search(r'token=([0-9a-f]+)', mail.outbox[0].body).group(1)
        data = {'token': token, 'password': 'Brandnew123!'}
        response = self.client.post('/api/auth/reset-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Brandnew123!'))
        self.assertIsNone(self.user.reset_password_token)

    def test_forgot_password_unknown_email(self):
        response = self.client.post('/api/auth/forgot-password/', {'email': 'nobody@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_reset_password_invalid_token(self):
        data = {'token': 'bogus', 'password': 'Brandnew123!'}
        response = self.client.post('/api/auth/reset-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid or expired reset token')

    def test_verify_email(self):
        response = self.client.post('/api/auth/resend-verification/', {'email': 'jane@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        token = re.search(r'token=([0-9a-f]+)', mail.outbox[0].body).group(1)
        response = self.client.post('/api/auth/verify-email/', {'token': token}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.email_verified)

    def test_resend_verification_already_verified(self):
        self.user.email_verified = True
        self.user.save()
        response = self.client.post('/api/auth/resend-verification/', {'email': 'jane@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_verify_email_with_otp(self):
        """Test the mailed six digit code verifies the account and signs the user in"""
        response = self.client.post('/api/auth/send-email-otp/', {'email': 'jane@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'OTP sent successfully')

        otp = re.search(r'code is (\d{6})', mail.outbox[0].body).group(1)
        data = {'email': 'jane@example.com', 'otp': otp}
        response = self.client.post('/api/auth/verify-email-otp/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('token', response.data['data'])
        self.user.refresh_from_db()
        self.assertTrue(self.user.email_verified)
        self.assertIsNone(self.user.email_otp)

        response = self.client.post('/api/auth/verify-email-otp/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_verify_email_otp_wrong_or_expired(self):
        self.client.post('/api/auth/send-email-otp/', {'email': 'jane@example.com'}, format='json')
        otp = re.search(r'code is (\d{6})', mail.outbox[0].body).group(1)
        wrong = '100000' if otp != '100000' else '100001'

        response = self.client.post(
            '/api/auth/verify-email-otp/', {'email': 'jane@example.com', 'otp': wrong}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid or expired OTP')

        User.objects.filter(pk=self.user.pk).update(email_otp_expires=timezone.now() - timedelta(minutes=1))
        response = self.client.post(
            '/api/auth/verify-email-otp/', {'email': 'jane@example.com', 'otp': otp}, format='json'
        )
        self.assertEqual(response.data['message'], 'Invalid or expired OTP')
        self.user.refresh_from_db()
        self.assertFalse(self.user.email_verified)

    def test_email_otp_validation(self):
        response = self.client.post(
            '/api/auth/verify-email-otp/', {'email': 'jane@example.com', 'otp': '12ab'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('otp', response.data['errors'])

        response = self.client.post('/api/auth/send-email-otp/', {'email': 'nobody@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.user.email_verified = True
        self.user.save()
        response = self.client.post('/api/auth/send-email-otp/', {'email': 'jane@example.com'}, format='json')
        self.assertEqual(response.data['message'], 'Email is already verified')

    @override_settings(STOREFRONT_MOCK_AUTH=True)
    def test_mock_token(self):
        """Test fixed development tokens resolve to their accounts"""
        TestDataFactory.create_user(email='testuser@example.com')
        self.client.credentials(HTTP_AUTHORIZATION='Bearer mock-user-token')
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['email'], 'testuser@example.com')


class AddressTests(CacheClearingMixin, TestCase):
    """Test saved address endpoints"""

    def setUp(self):
        super().setUp()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.address_data = {
            'type': 'home', 'address': '1 Park Street', 'city': 'Kolkata',
            'state': 'West Bengal', 'pin_code': '700016'
        }

    def test_first_address_becomes_default(self):
        response = self.client.post('/api/user/addresses/', self.address_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['data']), 1)
        self.assertTrue(response.data['data'][0]['is_default'])

    def test_new_default_replaces_old(self):
        first = TestDataFactory.create_address(self.user, is_default=True)
        response = self.client.post('/api/user/addresses/', {**self.address_data, 'is_default': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        first.refresh_from_db()
        self.assertFalse(first.is_default)
        self.assertEqual(self.user.addresses.filter(is_default=True).count(), 1)

    def test_update_address(self):
        address = TestDataFactory.create_address(self.user, is_default=True)
        response = self.client.put(f'/api/user/addresses/{address.id}/', {'city': 'Mysuru'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        address.refresh_from_db()
        self.assertEqual(address.city, 'Mysuru')

    def test_delete_default_promotes_next(self):
        default = TestDataFactory.create_address(self.user, is_default=True)
        other = TestDataFactory.create_address(self.user, city='Chennai')
        response = self.client.delete(f'/api/user/addresses/{default.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        other.refresh_from_db()
        self.assertTrue(other.is_default)

    def test_other_users_address_not_found(self):
        address = TestDataFactory.create_address(TestDataFactory.create_user())
        response = self.client.put(f'/api/user/addresses/{address.id}/', {'city': 'Pune'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(Address.objects.filter(pk=address.pk, city='Bengaluru').exists())


class WishlistTests(CacheClearingMixin, TestCase):
    """Test wishlist endpoints"""

    def setUp(self):
        super().setUp()
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(name='Whey Gold')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_add_to_wishlist(self):
        response = self.client.post(f'/api/user/wishlist/{self.product.id}/', {'auto_add_to_cart': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 1)
        item = WishlistItem.objects.get(user=self.user, product=self.product)
        self.assertTrue(item.auto_add_to_cart)
        self.assertTrue(item.notify_on_restock)
        self.assertFalse(item.was_out_of_stock)

    def test_add_twice_keeps_one_entry(self):
        self.client.post(f'/api/user/wishlist/{self.product.id}/', {}, format='json')
        self.client.post(f'/api/user/wishlist/{self.product.id}/', {}, format='json')
        self.assertEqual(WishlistItem.objects.filter(user=self.user).count(), 1)

    def test_add_out_of_stock_product_is_flagged(self):
        product = TestDataFactory.create_product(stock_quantity=0)
        self.client.post(f'/api/user/wishlist/{product.id}/', {}, format='json')
        self.assertTrue(WishlistItem.objects.get(product=product).was_out_of_stock)

    def test_add_missing_product(self):
        response = self.client.post('/api/user/wishlist/99999/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_preferences(self):
        TestDataFactory.create_wishlist_item(self.user, self.product)
        response = self.client.put(f'/api/user/wishlist/{self.product.id}/', {'notify_on_restock': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(WishlistItem.objects.get(user=self.user).notify_on_restock)

    def test_remove_from_wishlist(self):
        TestDataFactory.create_wishlist_item(self.user, self.product)
        response = self.client.delete(f'/api/user/wishlist/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], [])


class AdminUserTests(CacheClearingMixin, TestCase):
    """Test admin user management"""

    def setUp(self):
        super().setUp()
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user(email='buyer@example.com', name='Buyer')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_admin_role_sets_staff_flag(self):
        self.assertTrue(self.admin.is_staff)
        self.assertFalse(self.customer.is_staff)

    def test_list_users(self):
        response = self.client.get('/api/admin/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['total'], 2)

    def test_list_users_search_and_role(self):
        response = self.client.get('/api/admin/users/?search=buyer&role=user')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(response.data['data'][0]['email'], 'buyer@example.com')

    def test_update_role(self):
        """Test promoting a user writes an audit entry"""
        response = self.client.put(f'/api/admin/users/{self.customer.id}/role/', {'role': 'admin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.role, User.ROLE_ADMIN)
        self.assertTrue(self.customer.is_staff)
        log = AuditLog.objects.get(action='role_change')
        self.assertEqual(log.user, self.admin)
        self.assertEqual(log.changes['role'], {'old': 'user', 'new': 'admin'})

    def test_update_role_invalid(self):
        response = self.client.put(f'/api/admin/users/{self.customer.id}/role/', {'role': 'owner'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_audit_log_list(self):
        self.client.put(f'/api/admin/users/{self.customer.id}/role/', {'role': 'admin'}, format='json')
        response = self.client.get('/api/admin/audit-logs/?action=role_change')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(response.data['data'][0]['object_name'], 'buyer@example.com')


class UtilityTests(CacheClearingMixin, TestCase):
    """Test helpers shared by the apps"""

    def test_slugify_name(self):
        self.assertEqual(slugify_name('Whey Protein!'), 'whey-protein')
        self.assertEqual(slugify_name('  Pre  Workout '), 'pre-workout')

    def test_first_error_message(self):
        self.assertEqual(first_error_message({'name': ['Required']}), 'Required')
        self.assertEqual(first_error_message({}), 'Validation error')

    def test_invalidation_changes_cache_key(self):
        before = make_cache_key(PRODUCTS_LIST_PREFIX, 'public', page='1')
        invalidate_cache_pattern(PRODUCTS_LIST_PREFIX)
        after = make_cache_key(PRODUCTS_LIST_PREFIX, 'public', page='1')
        self.assertNotEqual(before, after)


class CommandTests(TestCase):
    """Test core management commands"""

    def test_fix_admin_user_creates_admin(self):
        call_command('fix_admin_user', email='boss@example.com', password='Admin123!', stdout=StringIO())
        user = User.objects.get(email='boss@example.com')
        self.assertEqual(user.role, User.ROLE_ADMIN)
        self.assertTrue(user.is_staff)
        self.assertTrue(user.check_password('Admin123!'))

    def test_fix_admin_user_repairs_role(self):
        user = TestDataFactory.create_user(email='boss@example.com')
        user.is_active = False
        user.save()
        call_command('fix_admin_user', email='boss@example.com', password='Fixed123!', stdout=StringIO())
        user.refresh_from_db()
        self.assertEqual(user.role, User.ROLE_ADMIN)
        self.assertTrue(user.is_active)
        self.assertTrue(user.check_password('Fixed123!'))

    def test_check_database(self):
        TestDataFactory.create_user()
        out = StringIO()
        call_command('check_database', stdout=out)
        self.assertIn('Users in database: 1 (0 admin)', out.getvalue())
