"""
Admin dashboard and product analytics

Both reports are cached; catalog and order changes invalidate them through
storefront.core.cache_signals.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Sum, Count, F, DecimalField, ExpressionWrapper
from django.db.models.functions import TruncDate
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, IsAdminUser

from storefront.catalog.models import Product
from storefront.core.cache_utils import (
    cached_query, DASHBOARD_PREFIX, DASHBOARD_CACHE_TTL, ANALYTICS_PREFIX, ANALYTICS_CACHE_TTL
)
from storefront.core.utils import success_response
from storefront.orders.models import Order, OrderItem
from storefront.orders.serializers import OrderSummarySerializer

logger = logging.getLogger(__name__)

LINE_REVENUE = ExpressionWrapper(F('price') * F('quantity'), output_field=DecimalField(max_digits=14, decimal_places=2))


def _money(value):
    return str((value or Decimal('0')).quantize(Decimal('0.01')))


def top_selling_products(limit):
    """Products ranked by quantity sold across all orders"""
    rows = (
        OrderItem.objects.filter(product__isnull=False)
        .values('product_id', 'product__name')
        .annotate(total_sold=Sum('quantity'), total_revenue=Sum(LINE_REVENUE))
        .order_by('-total_sold', 'product_id')[:limit]
    )
    return [
        {
            'product_id': row['product_id'],
            'name': row['product__name'],
            'total_sold': row['total_sold'],
            'total_revenue': _money(row['total_revenue']),
        }
        for row in rows
    ]


@cached_query(cache_ttl=DASHBOARD_CACHE_TTL, key_prefix=DASHBOARD_PREFIX)
def build_dashboard(today):
    """Dashboard payload for the month containing `today` (an ISO date string)"""
    User = get_user_model()
    paid_orders = Order.objects.filter(payment_status=Order.PAYMENT_PAID)

    now = timezone.localtime()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    daily = (
        paid_orders.filter(created_at__gte=month_start)
        .annotate(day=TruncDate('created_at'))
        .values('day')
        .annotate(revenue=Sum('total'), orders=Count('id'))
        .order_by('day')
    )

    recent_orders = Order.objects.select_related('user').order_by('-created_at')[:5]

    return {
        'stats': {
            'total_products': Product.objects.count(),
            'total_orders': Order.objects.count(),
            'total_users': User.objects.filter(role='user').count(),
            'total_revenue': _money(paid_orders.aggregate(total=Sum('total'))['total']),
        },
        'recent_orders': OrderSummarySerializer(recent_orders, many=True).data,
        'top_products': top_selling_products(5),
        'monthly_revenue': [
            {'date': row['day'].isoformat(), 'revenue': _money(row['revenue']), 'orders': row['orders']}
            for row in daily
        ],
    }


@cached_query(cache_ttl=ANALYTICS_CACHE_TTL, key_prefix=ANALYTICS_PREFIX)
def build_product_analytics():
    threshold = settings.STOREFRONT_LOW_STOCK_THRESHOLD
    low_stock = (
        Product.objects.filter(stock_quantity__lt=threshold)
        .select_related('category')
        .order_by('stock_quantity', 'name')
    )
    out_of_stock = Product.objects.filter(in_stock=False).select_related('category').order_by('name')
    distribution = (
        Product.objects.values('category_id', 'category__name')
        .annotate(count=Count('id'), total_value=Sum('price'))
        .order_by('-count', 'category__name')
    )

    return {
        'low_stock_products': [
            {'id': p.id, 'name': p.name, 'stock_quantity': p.stock_quantity, 'category': p.category_name}
            for p in low_stock
        ],
        'out_of_stock_products': [
            {'id': p.id, 'name': p.name, 'category': p.category_name}
            for p in out_of_stock
        ],
        'top_selling_products': top_selling_products(10),
        'category_distribution': [
            {
                'category_id': row['category_id'],
                'category': row['category__name'] or 'Uncategorized',
                'count': row['count'],
                'total_value': _money(row['total_value']),
            }
            for row in distribution
        ],
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def dashboard(request):
    """Store totals, recent orders, best sellers and this month's daily revenue"""
    data = build_dashboard(timezone.localdate().isoformat())
    return success_response(data=data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def product_analytics(request):
    return success_response(data=build_product_analytics())
