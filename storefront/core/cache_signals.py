"""
Cache invalidation signals
Automatically invalidate cache when catalog or order data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import (
    invalidate_products_cache, invalidate_categories_cache, invalidate_dashboard_cache
)

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

PRODUCT_MODELS = {'Product', 'ProductVariant', 'ProductReview'}
CATEGORY_MODELS = {'Category'}
DASHBOARD_MODELS = {'Order', 'OrderItem', 'Product', 'User'}


@contextmanager
def suspend_cache_signals():
    """
    Temporarily suspend cache invalidation signals for bulk operations.
    Invalidate manually after the block.
    """
    previous = is_suspended()
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = previous


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def invalidate_all():
    invalidate_products_cache()
    invalidate_categories_cache()
    invalidate_dashboard_cache()


@receiver([post_save, post_delete])
def invalidate_storefront_caches(sender, instance, **kwargs):
    """Invalidate cached listings and dashboard stats when their source rows change"""
    if is_suspended():
        return

    model_name = sender.__name__
    if model_name in PRODUCT_MODELS:
        invalidate_products_cache()
        # Category product counts follow product changes
        invalidate_categories_cache()
    elif model_name in CATEGORY_MODELS:
        invalidate_categories_cache()
        invalidate_products_cache()

    if model_name in DASHBOARD_MODELS:
        invalidate_dashboard_cache()
