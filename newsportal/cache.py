import logging

from django.core.cache import caches
from django.core.cache.backends.base import InvalidCacheBackendError

logger = logging.getLogger(__name__)


class CacheOperationError(Exception):
    pass


def get_cache(key, default=None, version=None, cache_name="default"):
    """Safe cache retrieval, any backend failure yields the default"""
    try:
        if not isinstance(key, str):
            raise ValueError("Cache key must be string")

        return caches[cache_name].get(key, default=default, version=version)
    except InvalidCacheBackendError as e:
        logger.warning(f"Invalid cache backend '{cache_name}': {e}")
        return default
    except Exception as e:
        logger.warning(f"Cache get failed for key {key}: {e}")
        return default


def set_cache(key, value, timeout=None, version=None, cache_name="default"):
    """Cache setter with timeout handling and validation"""
    try:
        if not isinstance(key, str):
            raise ValueError("Cache key must be string")

        caches[cache_name].set(key, value, timeout=timeout, version=version)
        return True
    except Exception as e:
        raise CacheOperationError(f"Cache set failed: {str(e)}")


def delete_cache(key, version=None, cache_name="default"):
    """Idempotent cache deletion"""
    try:
        caches[cache_name].delete(key, version=version)
        return True
    except Exception as e:
        logger.warning(f"Cache delete failed for key {key}: {e}")
        return False


def incr_cache(key, cache_name="default"):
    """
    Increment a counter key, creating it when missing.
    Used for generation counters that namespace groups of cached responses.
    """
    cache = caches[cache_name]
    try:
        return cache.incr(key)
    except ValueError:
        cache.set(key, 2, timeout=None)
        return 2
    except Exception as e:
        raise CacheOperationError(f"Cache increment failed: {str(e)}")
