"""
Caching utilities for expensive storefront queries.

Keys carry a per-prefix generation number so invalidation works on every
cache backend. On Redis the stale keys are also removed with SCAN.
"""
from django.conf import settings
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
PRODUCTS_LIST_CACHE_TTL = 120  # 2 minutes
CATEGORIES_CACHE_TTL = 300  # 5 minutes
DASHBOARD_CACHE_TTL = 300  # 5 minutes
ANALYTICS_CACHE_TTL = 600  # 10 minutes

PRODUCTS_LIST_PREFIX = 'products_list'
CATEGORIES_PREFIX = 'categories_list'
DASHBOARD_PREFIX = 'dashboard_stats'
ANALYTICS_PREFIX = 'product_analytics'


def _generation_key(prefix):
    return f"{prefix}:generation"


def get_generation(prefix):
    generation = cache.get(_generation_key(prefix))
    if generation is None:
        generation = 1
        cache.add(_generation_key(prefix), generation, None)
    return generation


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{get_generation(prefix)}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=300, key_prefix=DASHBOARD_PREFIX)
        def build_dashboard(year, month):
            # expensive query here
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator


def _uses_redis():
    return 'django_redis' in settings.CACHES.get('default', {}).get('BACKEND', '')


def _delete_redis_keys(pattern):
    from django_redis import get_redis_connection
    redis_conn = get_redis_connection("default")

    keys = []
    cursor = 0
    while True:
        cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}:*", count=100)
        keys.extend(partial_keys)
        if cursor == 0:
            break

    if keys:
        redis_conn.delete(*keys)
    return len(keys)


def invalidate_cache_pattern(prefix):
    """Invalidate every cached entry stored under a prefix"""
    try:
        try:
            cache.incr(_generation_key(prefix))
        except ValueError:
            cache.set(_generation_key(prefix), 2, None)

        if _uses_redis():
            deleted = _delete_redis_keys(prefix)
            logger.info(f"Invalidated {deleted} cache keys matching pattern: {prefix}")
        else:
            logger.info(f"Invalidated cache prefix: {prefix}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {prefix}: {str(e)}")


def invalidate_products_cache():
    """Invalidate all product listing and analytics caches"""
    invalidate_cache_pattern(PRODUCTS_LIST_PREFIX)
    invalidate_cache_pattern(ANALYTICS_PREFIX)


def invalidate_categories_cache():
    invalidate_cache_pattern(CATEGORIES_PREFIX)


def invalidate_dashboard_cache():
    """Invalidate dashboard KPIs cache"""
    invalidate_cache_pattern(DASHBOARD_PREFIX)
