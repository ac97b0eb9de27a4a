import logging

from newsportal.cache import CacheOperationError, get_cache, incr_cache

logger = logging.getLogger(__name__)

ARTICLES_GENERATION_KEY = "articles_generation"


def get_articles_generation():
    return get_cache(ARTICLES_GENERATION_KEY, default=1)


def generate_articles_cache_key(
    prefix="list", category=None, tag=None, featured=None, limit=10, offset=0
):
    """Generate cache key for an article listing based on its parameters"""
    key_parts = ["articles", f"v{get_articles_generation()}", prefix]

    if category:
        key_parts.append(f"category_{category}")

    if tag:
        key_parts.append(f"tag_{tag}")

    if featured is not None:
        key_parts.append(f"featured_{int(featured)}")

    key_parts.extend([f"limit_{limit}", f"offset_{offset}"])

    return "_".join(key_parts)


def invalidate_articles_cache():
    """
    Invalidate every cached article listing by bumping the generation that
    is embedded in their keys. Stale entries expire on their own.
    """
    try:
        incr_cache(ARTICLES_GENERATION_KEY)
        logger.debug("Successfully invalidated articles cache")
    except CacheOperationError as e:
        logger.warning(f"Failed to invalidate articles cache: {e}")
