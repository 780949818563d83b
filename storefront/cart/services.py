"""
Cart operations shared by the cart endpoints and the wishlist restock monitor
"""
import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone
from rest_framework import status

from storefront.catalog.models import Product
from storefront.core.emails import send_restock_email
from storefront.core.models import WishlistItem
from .models import Cart, CartItem

logger = logging.getLogger(__name__)


class CartError(Exception):
    """Cart operation refused; carries the HTTP status the view should return"""

    def __init__(self, message, status_code=status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def get_cart(user):
    cart, _ = Cart.objects.get_or_create(user=user)
    return cart


def get_variant(product, variant_id):
    if not variant_id:
        return None
    variant = product.variants.filter(variant_id=variant_id).first()
    if variant is None:
        raise CartError('Variant not found', status.HTTP_404_NOT_FOUND)
    return variant


def get_available_stock(product, variant=None):
    """Stock quantity of the variant when one is given, otherwise of the product"""
    if variant is not None:
        return variant.stock_quantity if variant.in_stock else 0
    return product.stock_quantity if product.in_stock else 0


def _touch(cart):
    cart.save(update_fields=['updated_at'])


def add_item(user, product_id, quantity=1, variant_id=''):
    """
    Add a product (or product variant) to the user's cart.

    An existing line for the same product and variant has its quantity
    incremented instead of a second line being created.
    """
    variant_id = variant_id or ''
    product = Product.objects.filter(pk=product_id).first()
    if product is None:
        raise CartError('Product not found', status.HTTP_404_NOT_FOUND)

    variant = get_variant(product, variant_id)
    available = get_available_stock(product, variant)
    if available < quantity:
        raise CartError(f'Only {available} items available in stock')

    with transaction.atomic():
        cart = get_cart(user)
        item = CartItem.objects.select_for_update().filter(
            cart=cart, product=product, variant_id=variant_id
        ).first()

        if item:
            new_quantity = item.quantity + quantity
            if new_quantity > available:
                raise CartError(
                    f'Cannot add {quantity} more items. Only {available - item.quantity} more available'
                )
            item.quantity = new_quantity
            item.save(update_fields=['quantity', 'updated_at'])
        else:
            CartItem.objects.create(
                cart=cart,
                product=product,
                variant_id=variant_id,
                variant_name=variant.name if variant else '',
                product_name=product.name,
                price=variant.price if variant else product.price,
                quantity=quantity,
            )
        _touch(cart)

    logger.info(f"Added {quantity}x {product.name} to cart for user {user.id}")
    return cart


def update_item(user, product_id, quantity, variant_id=''):
    """Set a line's quantity; zero or less removes the line"""
    cart = get_cart(user)
    item = cart.items.select_related('product').filter(product_id=product_id, variant_id=variant_id or '').first()
    if item is None:
        raise CartError('Item not found in cart', status.HTTP_404_NOT_FOUND)

    if quantity <= 0:
        item.delete()
    else:
        variant = get_variant(item.product, item.variant_id)
        available = get_available_stock(item.product, variant)
        if quantity > available:
            raise CartError(f'Only {available} items available in stock')
        item.quantity = quantity
        item.save(update_fields=['quantity', 'updated_at'])

    _touch(cart)
    return cart


def remove_item(user, product_id, variant_id=None):
    """Remove one variant line, or every line of the product when no variant is given"""
    cart = get_cart(user)
    items = cart.items.filter(product_id=product_id)
    if variant_id:
        items = items.filter(variant_id=variant_id)
    deleted, _ = items.delete()
    _touch(cart)
    logger.info(f"Removed {deleted} cart line(s) for product {product_id}, user {user.id}")
    return cart


def clear_cart(user):
    cart = get_cart(user)
    cart.items.all().delete()
    _touch(cart)
    return cart


def sync_cart(user, items):
    """
    Replace the server cart with the client's items.

    Returns (cart, results) where results lists the items that were added
    and the ones that failed with their error message.
    """
    results = {'success': [], 'failed': []}
    with transaction.atomic():
        clear_cart(user)
        for item in items:
            try:
                add_item(user, item.get('product_id'), item.get('quantity', 1), item.get('variant_id', ''))
                results['success'].append(item)
            except CartError as e:
                results['failed'].append({**item, 'error': e.message})
    return get_cart(user), results


def get_cart_stats(user):
    cart = Cart.objects.filter(user=user).prefetch_related('items').first()
    if cart is None:
        return {'item_count': 0, 'total_items': 0, 'total_value': '0.00', 'last_updated': None}
    return {
        'item_count': cart.item_count,
        'total_items': cart.total_items,
        'total_value': str(cart.total_value),
        'last_updated': cart.updated_at,
    }


def cleanup_old_carts(max_age_hours=24):
    """Delete carts untouched for longer than max_age_hours; returns the number deleted"""
    cutoff = timezone.now() - timedelta(hours=max_age_hours)
    stale = Cart.objects.filter(updated_at__lt=cutoff)
    count = stale.count()
    if count:
        stale.delete()
        logger.info(f"Cleaned up {count} old carts")
    return count


def is_wishlist_item_in_stock(item):
    if item.variant_id:
        variant = item.product.variants.filter(variant_id=item.variant_id).first()
        return bool(variant and variant.in_stock and variant.stock_quantity > 0)
    return item.product.in_stock and item.product.stock_quantity > 0


def process_wishlist_restocks():
    """
    Handle wishlist items whose product came back in stock.

    Items flagged `was_out_of_stock` that are now available are unflagged,
    auto-added to the cart when requested (and then dropped from the
    wishlist) and trigger a restock e-mail when the user asked for one.
    Items that have since sold out are flagged so a later restock is noticed.
    """
    summary = {'restocked': 0, 'added_to_cart': 0, 'notified': 0, 'flagged': 0, 'failed': 0}

    watching = WishlistItem.objects.filter(was_out_of_stock=False).select_related('product')
    for item in watching:
        if not is_wishlist_item_in_stock(item):
            item.was_out_of_stock = True
            item.save(update_fields=['was_out_of_stock'])
            summary['flagged'] += 1

    pending = WishlistItem.objects.filter(was_out_of_stock=True).select_related('product', 'user')
    for item in pending:
        if not is_wishlist_item_in_stock(item):
            continue

        summary['restocked'] += 1
        item.was_out_of_stock = False
        item.save(update_fields=['was_out_of_stock'])

        added_to_cart = False
        if item.auto_add_to_cart:
            try:
                add_item(item.user, item.product_id, 1, item.variant_id)
                added_to_cart = True
                summary['added_to_cart'] += 1
                item.delete()
            except CartError as e:
                summary['failed'] += 1
                logger.warning(f"Auto-add to cart failed for {item.user.email}, {item.product.name}: {e.message}")

        if item.notify_on_restock and send_restock_email(item.user, item.product, added_to_cart):
            summary['notified'] += 1

    logger.info(f"Wishlist restock check complete: {summary}")
    return summary
