"""
Order placement, cancellation, returns and status changes.

Stock is taken from the product (or the chosen variant) when an order is
placed and given back when it is cancelled.
"""
import logging
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework import status

from storefront.catalog.models import Product
from storefront.core.cache_signals import suspend_cache_signals, invalidate_all
from .models import Order, OrderItem, OrderStatusHistory

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


class OrderError(Exception):
    """Order operation refused; carries the HTTP status the view should return"""

    def __init__(self, message, status_code=status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def money(value):
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_totals(subtotal):
    """Return (tax, shipping, total) for an order subtotal"""
    subtotal = money(subtotal)
    tax = money(subtotal * Decimal(settings.STOREFRONT_TAX_RATE))
    if subtotal > Decimal(settings.STOREFRONT_FREE_SHIPPING_THRESHOLD):
        shipping = Decimal('0.00')
    else:
        shipping = money(settings.STOREFRONT_SHIPPING_FEE)
    return tax, shipping, subtotal + tax + shipping


def _variant_id(item):
    variant = item.get('variant')
    if isinstance(variant, dict):
        return str(variant.get('id') or '')
    return str(item.get('variant_id') or '')


def _reserve_stock(item):
    """Lock the product, check and take its stock; returns the order line data"""
    product = Product.objects.select_for_update().filter(pk=item['product']).first()
    if product is None:
        raise OrderError(f"Product {item['product']} not found")

    quantity = item['quantity']
    variant_id = _variant_id(item)
    variant = None
    if variant_id:
        variant = product.variants.select_for_update().filter(variant_id=variant_id).first()
        if variant is None:
            raise OrderError(f'Variant {variant_id} not found for product {product.name}')
        if not variant.in_stock or variant.stock_quantity < quantity:
            raise OrderError(f'Product {product.name} is out of stock or insufficient quantity')
        variant.stock_quantity -= quantity
        variant.sync_stock_flag()
        variant.save(update_fields=['stock_quantity', 'in_stock'])
    else:
        if not product.in_stock or product.stock_quantity < quantity:
            raise OrderError(f'Product {product.name} is out of stock or insufficient quantity')
        product.stock_quantity -= quantity
        product.sync_stock_flag()

    product.sales = F('sales') + quantity
    product.save(update_fields=['stock_quantity', 'in_stock', 'sales', 'updated_at'])

    return {
        'product': product,
        'name': product.name,
        'price': variant.price if variant else product.price,
        'quantity': quantity,
        'variant': {'id': variant.variant_id, 'name': variant.name, 'price': str(variant.price)} if variant else None,
    }


def _restore_stock(order):
    for item in order.items.select_related('product'):
        if item.product is None:
            continue
        product = Product.objects.select_for_update().get(pk=item.product_id)
        variant = None
        if item.variant_id:
            variant = product.variants.select_for_update().filter(variant_id=item.variant_id).first()
        if variant is not None:
            variant.stock_quantity += item.quantity
            variant.sync_stock_flag()
            variant.save(update_fields=['stock_quantity', 'in_stock'])
        else:
            product.stock_quantity += item.quantity
            product.sync_stock_flag()
        product.sales = max(product.sales - item.quantity, 0)
        product.save(update_fields=['stock_quantity', 'in_stock', 'sales', 'updated_at'])


def create_order(user, items, shipping_address, billing_address, payment_method, notes=''):
    """
    Place an order for a user, or for a guest when user is None.

    items is a list of {'product': id, 'quantity': n, 'variant': {'id': ...}}.
    Everything happens in one transaction: a failing line leaves stock untouched.
    """
    with transaction.atomic(), suspend_cache_signals():
        lines = [_reserve_stock(item) for item in items]
        subtotal = sum((line['price'] * line['quantity'] for line in lines), Decimal('0.00'))
        tax, shipping, total = calculate_totals(subtotal)

        order = Order.objects.create(
            user=user,
            subtotal=money(subtotal),
            tax=tax,
            shipping=shipping,
            total=total,
            payment_method=payment_method,
            shipping_address=shipping_address,
            billing_address=billing_address,
            notes=notes or '',
        )
        OrderItem.objects.bulk_create([OrderItem(order=order, **line) for line in lines])
        OrderStatusHistory.objects.create(
            order=order, status=Order.STATUS_PENDING, note='Order placed', changed_by=user
        )

        if user is not None:
            user.total_orders = F('total_orders') + 1
            user.total_spent = F('total_spent') + total
            user.last_order_date = timezone.now()
            user.save(update_fields=['total_orders', 'total_spent', 'last_order_date', 'updated_at'])
            user.refresh_from_db(fields=['total_orders', 'total_spent'])
    invalidate_all()

    logger.info(f"Order {order.order_number} created: {len(lines)} items, total {total}")
    return order


def cancel_order(order, changed_by=None, note='Order cancelled by customer'):
    if order.status == Order.STATUS_CANCELLED:
        raise OrderError('Order is already cancelled')
    if order.status in (Order.STATUS_SHIPPED, Order.STATUS_DELIVERED, Order.STATUS_RETURNED):
        raise OrderError('Cannot cancel shipped or delivered order')

    with transaction.atomic(), suspend_cache_signals():
        _restore_stock(order)
        order.status = Order.STATUS_CANCELLED
        order.save(update_fields=['status', 'updated_at'])
        OrderStatusHistory.objects.create(order=order, status=order.status, note=note, changed_by=changed_by)
    invalidate_all()

    logger.info(f"Order {order.order_number} cancelled")
    return order


def request_return(order, reason, changed_by=None):
    """Mark a delivered order as returned within the return window"""
    if order.status != Order.STATUS_DELIVERED:
        raise OrderError('Can only return delivered orders')

    delivered_at = order.delivered_at or order.updated_at
    if timezone.now() - delivered_at > timedelta(days=settings.STOREFRONT_RETURN_WINDOW_DAYS):
        raise OrderError(
            f'Returns must be requested within {settings.STOREFRONT_RETURN_WINDOW_DAYS} days of delivery'
        )

    with transaction.atomic():
        order.status = Order.STATUS_RETURNED
        order.return_reason = reason
        order.notes = f'Return requested: {reason}'
        order.save(update_fields=['status', 'return_reason', 'notes', 'updated_at'])
        OrderStatusHistory.objects.create(
            order=order, status=order.status, note=f'Return requested: {reason}', changed_by=changed_by
        )

    logger.info(f"Return requested for order {order.order_number}")
    return order


def update_order_status(order, new_status, changed_by=None, tracking_number=None, notes=None, payment_status=None):
    """Admin status change; appends a history entry and restores stock on cancellation"""
    if order.status == Order.STATUS_CANCELLED and new_status != Order.STATUS_CANCELLED:
        raise OrderError('Cannot change status of a cancelled order')

    with transaction.atomic(), suspend_cache_signals():
        if new_status == Order.STATUS_CANCELLED and order.status != Order.STATUS_CANCELLED:
            _restore_stock(order)

        order.status = new_status
        if new_status == Order.STATUS_DELIVERED and order.delivered_at is None:
            order.delivered_at = timezone.now()
        if tracking_number:
            order.tracking_number = tracking_number
        if payment_status:
            order.payment_status = payment_status
        order.save()

        OrderStatusHistory.objects.create(
            order=order,
            status=new_status,
            note=notes or f'Status changed to {new_status}',
            changed_by=changed_by,
        )
    invalidate_all()

    logger.info(f"Order {order.order_number} status changed to {new_status}")
    return order
