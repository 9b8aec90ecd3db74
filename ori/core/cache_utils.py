"""
Caching utilities for expensive aggregate queries
Uses Redis (django-redis) when configured
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
PRODUCTS_LIST_CACHE_TTL = 120  # 2 minutes
DASHBOARD_CACHE_TTL = 300  # 5 minutes
PIPELINE_CACHE_TTL = 60  # 1 minute
REPORTS_CACHE_TTL = 600  # 10 minutes

# Key prefixes
PRODUCTS_LIST_PREFIX = 'products_list'
DASHBOARD_PREFIX = 'dashboard'
PIPELINE_PREFIX = 'pipeline'
REPORTS_PREFIX = 'reports'


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=REPORTS_CACHE_TTL, key_prefix=REPORTS_PREFIX)
        def build_sales_dashboard(date_from, date_to):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(f"{key_prefix}:{func.__name__}", *args, **kwargs)

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


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern.

    django-redis exposes delete_pattern (SCAN based). Other backends cannot
    enumerate keys, so the whole cache is cleared instead.
    """
    try:
        if hasattr(cache, 'delete_pattern'):
            deleted = cache.delete_pattern(f"*{pattern}*")
            logger.info(f"Invalidated {deleted} cache keys matching pattern: {pattern}")
        else:
            cache.clear()
            logger.debug(f"Cache backend has no pattern support, cleared cache for: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def invalidate_products_cache():
    invalidate_cache_pattern(PRODUCTS_LIST_PREFIX)


def invalidate_dashboard_cache():
    invalidate_cache_pattern(DASHBOARD_PREFIX)
    invalidate_cache_pattern(REPORTS_PREFIX)


def invalidate_pipeline_cache():
    invalidate_cache_pattern(PIPELINE_PREFIX)
