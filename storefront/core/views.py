import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer

from storefront.catalog.models import Product
from .emails import send_verification_email, send_password_reset_email, send_email_otp
from .models import Address, WishlistItem, AuditLog
from .serializers import (
    UserSerializer, UserDetailSerializer, RegisterSerializer, LoginSerializer,
    ProfileUpdateSerializer, PasswordChangeSerializer, PasswordResetSerializer,
    AddressSerializer, WishlistItemSerializer, RoleUpdateSerializer, AuditLogSerializer
)
from .throttles import AuthRateThrottle
from .utils import (
    success_response, error_response, paginate, parse_bool,
    generate_token, generate_otp, hash_token, create_audit_log
)

logger = logging.getLogger(__name__)

User = get_user_model()

API_ENDPOINTS = {
    'auth': '/api/auth/',
    'users': '/api/user/',
    'products': '/api/products/',
    'categories': '/api/categories/',
    'cart': '/api/cart/',
    'orders': '/api/orders/',
    'admin': '/api/admin/',
    'health': '/api/health/',
    'docs': '/api/docs/',
}

API_DOCS = {
    'auth': {
        'POST /api/auth/register/': 'Register new user',
        'POST /api/auth/login/': 'Login user',
        'POST /api/auth/refresh/': 'Refresh access token',
        'GET /api/auth/me/': 'Get current user',
        'POST /api/auth/logout/': 'Logout user',
        'PUT /api/auth/profile/': 'Update user profile',
        'PUT /api/auth/password/': 'Change password',
        'POST /api/auth/forgot-password/': 'Request password reset e-mail',
        'POST /api/auth/reset-password/': 'Reset password with token',
        'POST /api/auth/verify-email/': 'Verify e-mail with token',
        'POST /api/auth/resend-verification/': 'Resend verification e-mail',
        'POST /api/auth/send-email-otp/': 'Send e-mail verification code',
        'POST /api/auth/verify-email-otp/': 'Verify e-mail with code',
    },
    'user': {
        'GET /api/user/addresses/': 'List saved addresses',
        'POST /api/user/addresses/': 'Add address',
        'PUT /api/user/addresses/:id/': 'Update address',
        'DELETE /api/user/addresses/:id/': 'Delete address',
        'GET /api/user/wishlist/': 'Get wishlist',
        'POST /api/user/wishlist/:productId/': 'Add product to wishlist',
        'PUT /api/user/wishlist/:productId/': 'Update wishlist item preferences',
        'DELETE /api/user/wishlist/:productId/': 'Remove product from wishlist',
    },
    'products': {
        'GET /api/products/': 'Get all products with filtering',
        'GET /api/products/:id/': 'Get single product',
        'POST /api/products/:id/reviews/': 'Add product review',
        'GET /api/categories/': 'Get all categories',
        'GET /api/categories/:id/': 'Get single category',
    },
    'cart': {
        'GET /api/cart/': 'Get cart',
        'POST /api/cart/add/': 'Add item to cart',
        'PUT /api/cart/update/': 'Update item quantity',
        'DELETE /api/cart/remove/': 'Remove item from cart',
        'DELETE /api/cart/clear/': 'Clear cart',
        'POST /api/cart/sync/': 'Replace cart with client items',
        'GET /api/cart/stats/': 'Cart statistics',
    },
    'orders': {
        'GET /api/orders/': 'Get user orders',
        'POST /api/orders/': 'Create order',
        'GET /api/orders/:id/': 'Get single order',
        'PUT /api/orders/:id/cancel/': 'Cancel order',
        'PUT /api/orders/:id/return/': 'Request return',
        'GET /api/orders/:id/tracking/': 'Track order',
    },
    'admin': {
        'GET /api/admin/dashboard/': 'Get admin dashboard stats',
        'GET /api/admin/orders/': 'Get all orders (admin)',
        'PUT /api/admin/orders/:id/status/': 'Update order status',
        'GET /api/admin/users/': 'Get all users (admin)',
        'PUT /api/admin/users/:id/role/': 'Update user role',
        'GET /api/admin/products/': 'List products (admin)',
        'POST /api/admin/products/': 'Create product (admin)',
        'PUT /api/admin/products/:id/': 'Update product (admin)',
        'DELETE /api/admin/products/:id/': 'Delete product (admin)',
        'GET /api/admin/products/analytics/': 'Product analytics',
        'PUT /api/admin/products/bulk-stock/': 'Bulk update stock',
        'PUT /api/admin/products/bulk-featured/': 'Bulk update featured flag',
        'DELETE /api/admin/products/bulk/': 'Bulk delete products',
        'POST /api/admin/categories/': 'Create category',
        'PUT /api/admin/categories/:id/': 'Update category',
        'DELETE /api/admin/categories/:id/': 'Delete category',
    },
}


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['name'] = user.name
        token['role'] = user.role
        return token


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


def issue_tokens(user):
    refresh = CustomTokenObtainPairSerializer.get_token(user)
    return {
        'token': str(refresh.access_token),
        'refresh': str(refresh),
    }


def start_email_verification(user):
    raw, hashed = generate_token()
    user.email_verification_token = hashed
    user.email_verification_expires = timezone.now() + timedelta(hours=settings.EMAIL_VERIFICATION_TOKEN_HOURS)
    user.save(update_fields=['email_verification_token', 'email_verification_expires', 'updated_at'])
    send_verification_email(user, raw)


# API index views
@api_view(['GET'])
@permission_classes([AllowAny])
def api_index(request):
    return success_response(
        message='BBN Nutrition API',
        version=settings.STOREFRONT_API_VERSION,
        endpoints=API_ENDPOINTS,
        timestamp=timezone.now().isoformat(),
    )


@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    return success_response(
        status='OK',
        message='BBN Nutrition API is running',
        timestamp=timezone.now().isoformat(),
        version=settings.STOREFRONT_API_VERSION,
    )


@api_view(['GET'])
@permission_classes([AllowAny])
def api_docs(request):
    return success_response(
        message='BBN Nutrition API Documentation',
        version=settings.STOREFRONT_API_VERSION,
        endpoints=API_DOCS,
    )


@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([AllowAny])
def route_not_found(request):
    return error_response('Route not found', status.HTTP_404_NOT_FOUND)


# Auth views
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([AuthRateThrottle])
def register(request):
    """Register a customer account and mail a verification link"""
    serializer = RegisterSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    data = serializer.validated_data
    existing = User.objects.filter(email=data['email']).first()
    if existing:
        if not existing.email_verified:
            return success_response(
                data={'user': UserSerializer(existing).data, 'requires_verification': True},
                message='User exists but not verified. Please verify your email.',
            )
        return error_response('User already exists with this email and is verified. Please login instead.')

    user = User.objects.create_user(
        email=data['email'],
        password=data['password'],
        name=data['name'],
        phone=data.get('phone') or None,
    )
    start_email_verification(user)
    logger.info(f"Registered user {user.email}")

    return success_response(
        data={'user': UserSerializer(user).data, **issue_tokens(user)},
        message='User registered successfully. Please verify your email.',
        status_code=status.HTTP_201_CREATED,
    )


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([AuthRateThrottle])
def login(request):
    serializer = LoginSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    user = authenticate(
        request,
        email=serializer.validated_data['email'].strip().lower(),
        password=serializer.validated_data['password'],
    )
    if user is None or user.deleted_at is not None:
        return error_response('Invalid credentials', status.HTTP_401_UNAUTHORIZED)

    user.last_login = timezone.now()
    user.save(update_fields=['last_login', 'updated_at'])

    tokens = issue_tokens(user)
    return success_response(
        message='Login successful',
        user=UserSerializer(user).data,
        **tokens,
    )


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([AuthRateThrottle])
def refresh_token(request):
    """Exchange a refresh token for a new access token"""
    serializer = CustomTokenRefreshSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return success_response(data={'token': serializer.validated_data['access']})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me(request):
    user = User.objects.prefetch_related('addresses', 'wishlist_items__product').get(pk=request.user.pk)
    return success_response(data=UserDetailSerializer(user).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    # JWTs are stateless; the client discards its tokens
    return success_response(message='Logged out successfully')


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def update_profile(request):
    serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)
    user = serializer.save()
    return success_response(data=UserSerializer(user).data, message='Profile updated successfully')


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def change_password(request):
    serializer = PasswordChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    user = request.user
    if not user.check_password(serializer.validated_data['current_password']):
        return error_response('Current password is incorrect', status.HTTP_401_UNAUTHORIZED)

    user.set_password(serializer.validated_data['new_password'])
    user.save()
    return success_response(message='Password updated successfully')


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([AuthRateThrottle])
def forgot_password(request):
    email = (request.data.get('email') or '').strip().lower()
    if not email:
        return error_response('Validation error', errors={'email': ['Please provide a valid email']})

    user = User.objects.filter(email=email, is_active=True).first()
    if not user:
        return error_response('No user found with this email address', status.HTTP_404_NOT_FOUND)

    raw, hashed = generate_token()
    user.reset_password_token = hashed
    user.reset_password_expires = timezone.now() + timedelta(minutes=settings.PASSWORD_RESET_TOKEN_MINUTES)
    user.save(update_fields=['reset_password_token', 'reset_password_expires', 'updated_at'])
    send_password_reset_email(user, raw)
    return success_response(message='Password reset email sent')


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([AuthRateThrottle])
def reset_password(request):
    serializer = PasswordResetSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    user = User.objects.filter(
        reset_password_token=hash_token(serializer.validated_data['token']),
        reset_password_expires__gt=timezone.now(),
    ).first()
    if not user:
        return error_response('Invalid or expired reset token')

    user.set_password(serializer.validated_data['password'])
    user.reset_password_token = None
    user.reset_password_expires = None
    user.save()
    return success_response(message='Password reset successful')


@api_view(['POST'])
@permission_classes([AllowAny])
def verify_email(request):
    token = request.data.get('token')
    if not token:
        return error_response('Validation error', errors={'token': ['Verification token is required']})

    user = User.objects.filter(
        email_verification_token=hash_token(token),
        email_verification_expires__gt=timezone.now(),
    ).first()
    if not user:
        return error_response('Invalid or expired verification token')

    user.email_verified = True
    user.email_verification_token = None
    user.email_verification_expires = None
    user.save()
    return success_response(message='Email verified successfully')


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([AuthRateThrottle])
def resend_verification(request):
    email = (request.data.get('email') or '').strip().lower()
    if not email:
        return error_response('Validation error', errors={'email': ['Please provide a valid email']})

    user = User.objects.filter(email=email).first()
    if not user:
        return error_response('No user found with this email address', status.HTTP_404_NOT_FOUND)
    if user.email_verified:
        return error_response('Email is already verified')

    start_email_verification(user)
    return success_response(message='Verification email sent')


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([AuthRateThrottle])
def send_email_otp_view(request):
    """Mail a six digit verification code as an alternative to the link"""
    email = (request.data.get('email') or '').strip().lower()
    if not email:
        return error_response('Validation error', errors={'email': ['Please provide a valid email']})

    user = User.objects.filter(email=email).first()
    if not user:
        return error_response('User not found with this email', status.HTTP_404_NOT_FOUND)
    if user.email_verified:
        return error_response('Email is already verified')

    raw, hashed = generate_otp()
    user.email_otp = hashed
    user.email_otp_expires = timezone.now() + timedelta(minutes=settings.EMAIL_OTP_MINUTES)
    user.save(update_fields=['email_otp', 'email_otp_expires', 'updated_at'])
    if not send_email_otp(user, raw):
        return error_response('Failed to send OTP', status.HTTP_500_INTERNAL_SERVER_ERROR)
    return success_response(message='OTP sent successfully')


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([AuthRateThrottle])
def verify_email_otp(request):
    email = (request.data.get('email') or '').strip().lower()
    otp = str(request.data.get('otp') or '').strip()
    if not email:
        return error_response('Validation error', errors={'email': ['Please provide a valid email']})
    if len(otp) != 6 or not otp.isdigit():
        return error_response('Validation error', errors={'otp': ['OTP must be a 6-digit number']})

    user = User.objects.filter(email=email).first()
    if not user:
        return error_response('User not found with this email', status.HTTP_404_NOT_FOUND)
    if not user.email_otp or user.email_otp != hash_token(otp) or user.email_otp_expires <= timezone.now():
        return error_response('Invalid or expired OTP')

    user.email_verified = True
    user.email_otp = None
    user.email_otp_expires = None
    user.email_verification_token = None
    user.email_verification_expires = None
    user.save()
    logger.info(f"Email verified by OTP for {user.email}")
    return success_response(
        data={'user': UserSerializer(user).data, **issue_tokens(user)},
        message='Email verified successfully',
    )


# Address views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def address_list_create(request):
    """List saved addresses or add a new one"""
    if request.method == 'GET':
        addresses = request.user.addresses.all()
        return success_response(data=AddressSerializer(addresses, many=True).data)

    serializer = AddressSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    with transaction.atomic():
        has_addresses = request.user.addresses.exists()
        make_default = serializer.validated_data.get('is_default', False) or not has_addresses
        if make_default:
            request.user.addresses.update(is_default=False)
        serializer.save(user=request.user, is_default=make_default)

    addresses = request.user.addresses.all()
    return success_response(
        data=AddressSerializer(addresses, many=True).data,
        message='Address added successfully',
        status_code=status.HTTP_201_CREATED,
    )


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def address_detail(request, pk):
    address = Address.objects.filter(pk=pk, user=request.user).first()
    if not address:
        return error_response('Address not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'PUT':
        serializer = AddressSerializer(address, data=request.data, partial=True)
        if not serializer.is_valid():
            return error_response('Validation error', errors=serializer.errors)
        with transaction.atomic():
            if serializer.validated_data.get('is_default'):
                request.user.addresses.exclude(pk=address.pk).update(is_default=False)
            serializer.save()
        message = 'Address updated successfully'
    else:
        with transaction.atomic():
            was_default = address.is_default
            address.delete()
            if was_default:
                replacement = request.user.addresses.order_by('created_at', 'id').first()
                if replacement:
                    replacement.is_default = True
                    replacement.save(update_fields=['is_default', 'updated_at'])
        message = 'Address deleted successfully'

    addresses = request.user.addresses.all()
    return success_response(data=AddressSerializer(addresses, many=True).data, message=message)


# Wishlist views
def _wishlist_payload(user):
    items = WishlistItem.objects.filter(user=user).select_related('product')
    return WishlistItemSerializer(items, many=True).data


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def wishlist(request):
    return success_response(data=_wishlist_payload(request.user))


@api_view(['POST', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def wishlist_item(request, product_id):
    """Add, update the restock options of, or remove a wishlist entry"""
    variant_id = request.data.get('variant_id') or request.query_params.get('variant_id') or ''

    if request.method == 'POST':
        product = Product.objects.filter(pk=product_id).first()
        if not product:
            return error_response('Product not found', status.HTTP_404_NOT_FOUND)

        auto_add = parse_bool(request.data.get('auto_add_to_cart'))
        notify = parse_bool(request.data.get('notify_on_restock'))
        WishlistItem.objects.update_or_create(
            user=request.user,
            product=product,
            variant_id=variant_id,
            defaults={
                'auto_add_to_cart': bool(auto_add),
                'notify_on_restock': notify is not False,
                'was_out_of_stock': not product.in_stock or product.stock_quantity == 0,
            },
        )
        return success_response(data=_wishlist_payload(request.user), message='Product added to wishlist')

    items = WishlistItem.objects.filter(user=request.user, product_id=product_id)
    if variant_id:
        items = items.filter(variant_id=variant_id)

    if request.method == 'PUT':
        updates = {}
        auto_add = parse_bool(request.data.get('auto_add_to_cart'))
        notify = parse_bool(request.data.get('notify_on_restock'))
        if auto_add is not None:
            updates['auto_add_to_cart'] = auto_add
        if notify is not None:
            updates['notify_on_restock'] = notify
        if updates:
            items.update(**updates)
        return success_response(data=_wishlist_payload(request.user), message='Wishlist item updated')

    items.delete()
    return success_response(data=_wishlist_payload(request.user), message='Product removed from wishlist')


# Admin user views
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_user_list(request):
    """List users with role and search filters"""
    users = User.objects.all()

    role = request.query_params.get('role')
    if role:
        users = users.filter(role=role)

    search = request.query_params.get('search')
    if search:
        users = users.filter(Q(name__icontains=search) | Q(email__icontains=search))

    sort_by = request.query_params.get('sort_by', 'created_at')
    if sort_by not in ('created_at', 'name', 'email', 'last_login', 'total_spent', 'total_orders'):
        sort_by = 'created_at'
    prefix = '' if request.query_params.get('sort_order') == 'asc' else '-'
    users = users.order_by(f'{prefix}{sort_by}', 'id')

    page_items, pagination = paginate(request, users, default_limit=10)
    return success_response(data=UserSerializer(page_items, many=True).data, pagination=pagination)


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_user_role(request, pk):
    serializer = RoleUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    user = get_object_or_404(User, pk=pk)
    old_role = user.role
    user.role = serializer.validated_data['role']
    user.save()

    create_audit_log(
        request=request,
        action='role_change',
        model_name='User',
        object_id=user.id,
        object_name=user.email,
        changes={'role': {'old': old_role, 'new': user.role}},
    )
    return success_response(data=UserSerializer(user).data, message='User role updated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def audit_log_list(request):
    """List audit log entries, newest first"""
    logs = AuditLog.objects.select_related('user')
    for param in ('action', 'model_name', 'object_id'):
        value = request.query_params.get(param)
        if value:
            logs = logs.filter(**{param: value})

    page_items, pagination = paginate(request, logs, default_limit=50)
    return success_response(data=AuditLogSerializer(page_items, many=True).data, pagination=pagination)
