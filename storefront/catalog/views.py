import logging
import os
import uuid

from django.conf import settings
from django.core.cache import cache
from django.core.files.storage import default_storage
from django.db import transaction
from django.db.models import Avg, Count, F
from django.http import QueryDict
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny

from storefront.core.cache_signals import suspend_cache_signals, invalidate_all
from storefront.core.cache_utils import (
    make_cache_key, PRODUCTS_LIST_PREFIX, PRODUCTS_LIST_CACHE_TTL,
    CATEGORIES_PREFIX, CATEGORIES_CACHE_TTL
)
from storefront.core.utils import (
    success_response, error_response, paginate, first_error_message, create_audit_log, parse_bool
)
from .filters import ProductFilter, AdminProductFilter
from .models import Category, Product, ProductReview
from .serializers import (
    CategorySerializer, ProductSerializer, ProductListSerializer, ProductReviewSerializer
)
from .utils import parse_tags, parse_json_field

logger = logging.getLogger(__name__)

PUBLIC_SORTS = {
    'newest': ['-created_at'],
    'price_asc': ['price'],
    'price_desc': ['-price'],
    'rating': ['-rating', '-review_count'],
    'popularity': ['-sales', '-views'],
    'name': ['name'],
}
ADMIN_SORT_FIELDS = ('created_at', 'updated_at', 'name', 'price', 'stock_quantity', 'rating', 'sales', 'brand')
ALLOWED_IMAGE_TYPES = ('image/jpeg', 'image/png', 'image/gif', 'image/webp')


def _category_queryset():
    return Category.objects.select_related('parent').annotate(product_count=Count('products'))


def _get_category(identifier, queryset=None):
    """Look a category up by numeric id or slug"""
    queryset = queryset if queryset is not None else _category_queryset()
    identifier = str(identifier)
    if identifier.isdigit():
        return queryset.filter(pk=int(identifier)).first()
    return queryset.filter(slug=identifier.lower()).first()


def _product_detail_queryset():
    return Product.objects.select_related('category').prefetch_related('variants', 'reviews__user')


# Category views
@api_view(['GET'])
@permission_classes([AllowAny])
def category_list(request):
    """Active categories sorted by name, with product counts"""
    cache_key = make_cache_key(CATEGORIES_PREFIX, 'public')
    payload = cache.get(cache_key)
    if payload is None:
        categories = _category_queryset().filter(is_active=True).order_by('name')
        data = CategorySerializer(categories, many=True).data
        payload = {'count': len(data), 'data': data}
        cache.set(cache_key, payload, CATEGORIES_CACHE_TTL)
    return success_response(**payload)


@api_view(['GET'])
@permission_classes([AllowAny])
def category_detail(request, identifier):
    category = _get_category(identifier)
    if not category:
        return error_response('Category not found', status.HTTP_404_NOT_FOUND)
    return success_response(data=CategorySerializer(category).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_category_list_create(request):
    """List every category, including inactive ones, or create a new one"""
    if request.method == 'GET':
        categories = _category_queryset().order_by('sort_order', 'name')
        data = CategorySerializer(categories, many=True).data
        return success_response(data=data, count=len(data))

    serializer = CategorySerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(first_error_message(serializer.errors), errors=serializer.errors)
    category = serializer.save()
    create_audit_log(request, 'create', 'Category', category.id, object_name=category.name)
    return success_response(
        data=CategorySerializer(_get_category(category.id)).data,
        message='Category created successfully',
        status_code=status.HTTP_201_CREATED,
    )


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_category_detail(request, pk):
    """Update or delete a category"""
    category = Category.objects.filter(pk=pk).first()
    if not category:
        return error_response('Category not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'DELETE':
        if category.children.exists():
            return error_response(
                'Cannot delete category with child categories. Please delete or reassign child categories first.'
            )
        name = category.name
        category.delete()
        create_audit_log(request, 'delete', 'Category', pk, object_name=name)
        return success_response(message='Category deleted successfully')

    serializer = CategorySerializer(category, data=request.data, partial=True)
    if not serializer.is_valid():
        return error_response(first_error_message(serializer.errors), errors=serializer.errors)
    category = serializer.save()
    create_audit_log(request, 'update', 'Category', category.id, object_name=category.name,
                     changes={key: str(value) for key, value in serializer.validated_data.items()})
    return success_response(
        data=CategorySerializer(_get_category(category.id)).data,
        message='Category updated successfully',
    )


# Public product views
@api_view(['GET'])
@permission_classes([AllowAny])
def product_list(request):
    """Browse products with filters, sorting and pagination"""
    params = {key: request.query_params.get(key) for key in sorted(request.query_params.keys())}
    cache_key = make_cache_key(PRODUCTS_LIST_PREFIX, 'public', **params)
    payload = cache.get(cache_key)
    if payload is not None:
        return success_response(**payload)

    product_filter = ProductFilter(request.query_params, queryset=Product.objects.select_related('category'))
    if not product_filter.is_valid():
        return error_response('Validation error', errors=product_filter.errors)

    ordering = PUBLIC_SORTS.get(request.query_params.get('sort', 'newest'), PUBLIC_SORTS['newest'])
    products = product_filter.qs.order_by(*ordering, 'id')

    page_items, pagination = paginate(request, products, default_limit=12)
    payload = {
        'data': ProductListSerializer(page_items, many=True).data,
        'pagination': pagination,
    }
    cache.set(cache_key, payload, PRODUCTS_LIST_CACHE_TTL)
    return success_response(**payload)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_detail(request, pk):
    product = _product_detail_queryset().filter(pk=pk).first()
    if not product:
        return error_response('Product not found', status.HTTP_404_NOT_FOUND)

    Product.objects.filter(pk=pk).update(views=F('views') + 1)
    product.views += 1
    return success_response(data=ProductSerializer(product).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def product_review_create(request, pk):
    """Add the current user's review and refresh the product rating"""
    product = Product.objects.filter(pk=pk).first()
    if not product:
        return error_response('Product not found', status.HTTP_404_NOT_FOUND)

    serializer = ProductReviewSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    if ProductReview.objects.filter(product=product, user=request.user).exists():
        return error_response('Product already reviewed')

    with transaction.atomic():
        serializer.save(product=product, user=request.user)
        stats = product.reviews.aggregate(average=Avg('rating'), total=Count('id'))
        product.rating = round(stats['average'] or 0, 1)
        product.review_count = stats['total']
        product.save(update_fields=['rating', 'review_count', 'updated_at'])

    product = _product_detail_queryset().get(pk=pk)
    return success_response(
        data=ProductSerializer(product).data,
        message='Review added successfully',
        status_code=status.HTTP_201_CREATED,
    )


# Admin product views
def _store_uploaded_images(files):
    """Save uploaded product images and return their public URLs"""
    urls = []
    for upload in files:
        content_type = getattr(upload, 'content_type', '') or ''
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise ValueError('Only image files are allowed')
        extension = os.path.splitext(upload.name)[1].lower() or '.jpg'
        path = default_storage.save(f"products/{uuid.uuid4().hex}{extension}", upload)
        urls.append(default_storage.url(path))
    return urls


def _product_payload(request):
    """
    Normalise JSON and multipart product submissions.

    Multipart forms send variants, nutrition facts and dimensions as JSON
    strings and tags as a comma separated string. Raises ValueError with a
    client-facing message on malformed input.
    """
    data = request.data
    uploads = request.FILES.getlist('images') if request.FILES else []

    if isinstance(data, QueryDict):
        payload = {key: data.get(key) for key in data.keys() if key not in ('images', 'tags')}
        existing_images = [value for value in data.getlist('images') if isinstance(value, str) and value]
        if existing_images or 'images' in data:
            payload['images'] = existing_images
        if 'tags' in data:
            tags = data.getlist('tags')
            payload['tags'] = parse_tags(tags[0] if len(tags) == 1 else tags)
    else:
        payload = dict(data)
        if 'tags' in payload:
            payload['tags'] = parse_tags(payload['tags'])

    if len(uploads) > settings.STOREFRONT_MAX_PRODUCT_IMAGES:
        raise ValueError(f'You can upload up to {settings.STOREFRONT_MAX_PRODUCT_IMAGES} images')

    if 'variants' in payload:
        variants = parse_json_field(payload.pop('variants'), list, 'Invalid variants format')
        payload['variants_input'] = variants or []
    if 'nutrition_facts' in payload:
        payload['nutrition_facts'] = parse_json_field(payload['nutrition_facts'], dict, 'Invalid nutrition facts format') or {}
    if 'dimensions' in payload:
        payload['dimensions'] = parse_json_field(payload['dimensions'], dict, 'Invalid dimensions format') or {}

    if uploads:
        payload['images'] = list(payload.get('images') or []) + _store_uploaded_images(uploads)
    return payload


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def admin_product_list_create(request):
    """List products for the admin grid or create a product"""
    if request.method == 'GET':
        product_filter = AdminProductFilter(request.query_params, queryset=Product.objects.select_related('category'))
        if not product_filter.is_valid():
            return error_response('Validation error', errors=product_filter.errors)

        sort_by = request.query_params.get('sort_by', 'created_at')
        if sort_by not in ADMIN_SORT_FIELDS:
            sort_by = 'created_at'
        prefix = '' if request.query_params.get('sort_order') == 'asc' else '-'
        products = product_filter.qs.order_by(f'{prefix}{sort_by}', 'id')

        page_items, pagination = paginate(request, products, default_limit=20)
        return success_response(data=ProductListSerializer(page_items, many=True).data, pagination=pagination)

    try:
        payload = _product_payload(request)
    except ValueError as e:
        return error_response(str(e))

    serializer = ProductSerializer(data=payload)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)
    product = serializer.save()
    logger.info(f"Product created: {product.name} ({product.sku})")
    create_audit_log(request, 'create', 'Product', product.id, object_name=product.name)

    product = _product_detail_queryset().get(pk=product.pk)
    return success_response(
        data=ProductSerializer(product).data,
        message='Product created successfully',
        status_code=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def admin_product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = _product_detail_queryset().filter(pk=pk).first()
    if not product:
        return error_response('Product not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(data=ProductSerializer(product).data)

    if request.method == 'DELETE':
        name = product.name
        product.delete()
        create_audit_log(request, 'delete', 'Product', pk, object_name=name)
        return success_response(message='Product deleted successfully')

    try:
        payload = _product_payload(request)
    except ValueError as e:
        return error_response(str(e))

    serializer = ProductSerializer(product, data=payload, partial=True)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)
    serializer.save()
    create_audit_log(request, 'update', 'Product', pk, object_name=product.name,
                     changes={'fields': sorted(serializer.validated_data.keys())})

    product = _product_detail_queryset().get(pk=pk)
    return success_response(data=ProductSerializer(product).data, message='Product updated successfully')


def _validate_product_ids(product_ids):
    ids = []
    for value in product_ids:
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            raise ValueError(f'Invalid product ID: {value}')
    missing = set(ids) - set(Product.objects.filter(pk__in=ids).values_list('pk', flat=True))
    if missing:
        raise LookupError(f'Product with ID {sorted(missing)[0]} not found')
    return ids


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_bulk_update_stock(request):
    """Set stock for several products; in_stock follows the new quantity"""
    updates = request.data.get('updates')
    if not isinstance(updates, list) or not updates:
        return error_response('Invalid updates format')

    stock_by_id = {}
    for update in updates:
        if not isinstance(update, dict):
            return error_response('Invalid updates format')
        try:
            quantity = int(update.get('stock_quantity'))
        except (TypeError, ValueError):
            return error_response('Stock quantity must be a non-negative integer')
        if quantity < 0:
            return error_response('Stock quantity must be a non-negative integer')
        stock_by_id[update.get('product_id')] = quantity

    try:
        ids = _validate_product_ids(stock_by_id.keys())
    except ValueError as e:
        return error_response(str(e))
    except LookupError as e:
        return error_response(str(e), status.HTTP_404_NOT_FOUND)

    quantities = {int(key): value for key, value in stock_by_id.items()}
    with transaction.atomic(), suspend_cache_signals():
        for product in Product.objects.select_for_update().filter(pk__in=ids):
            product.stock_quantity = quantities[product.pk]
            product.sync_stock_flag()
            product.save(update_fields=['stock_quantity', 'in_stock', 'updated_at'])
    invalidate_all()

    create_audit_log(request, 'bulk_update', 'Product', ','.join(str(i) for i in ids),
                     changes={'stock_quantity': {str(k): v for k, v in quantities.items()}})
    return success_response(data={'modified_count': len(ids)}, message='Stock updated successfully')


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_bulk_update_featured(request):
    updates = request.data.get('updates')
    if not isinstance(updates, list) or not updates:
        return error_response('Invalid updates format')

    featured_by_id = {}
    for update in updates:
        if not isinstance(update, dict) or update.get('product_id') is None:
            return error_response('Product ID is required')
        if update.get('featured') is None:
            return error_response('Featured status is required')
        featured_by_id[update['product_id']] = parse_bool(update['featured'])

    try:
        ids = _validate_product_ids(featured_by_id.keys())
    except ValueError as e:
        return error_response(str(e))
    except LookupError as e:
        return error_response(str(e), status.HTTP_404_NOT_FOUND)

    flags = {int(key): value for key, value in featured_by_id.items()}
    with transaction.atomic(), suspend_cache_signals():
        for product in Product.objects.select_for_update().filter(pk__in=ids):
            product.featured = flags[product.pk]
            product.save(update_fields=['featured', 'updated_at'])
    invalidate_all()

    create_audit_log(request, 'bulk_update', 'Product', ','.join(str(i) for i in ids),
                     changes={'featured': {str(k): v for k, v in flags.items()}})
    return success_response(data={'modified_count': len(ids)}, message='Featured status updated successfully')


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_bulk_delete(request):
    product_ids = request.data.get('product_ids')
    if not isinstance(product_ids, list) or not product_ids:
        return error_response('Product IDs array is required')

    try:
        ids = [int(value) for value in product_ids]
    except (TypeError, ValueError):
        return error_response('Product IDs must be integers')

    with transaction.atomic(), suspend_cache_signals():
        deleted_count = Product.objects.filter(pk__in=ids).count()
        Product.objects.filter(pk__in=ids).delete()
    invalidate_all()

    create_audit_log(request, 'bulk_delete', 'Product', ','.join(str(i) for i in ids),
                     changes={'deleted_count': deleted_count})
    return success_response(data={'deleted_count': deleted_count}, message='Products deleted successfully')
