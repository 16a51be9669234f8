from urllib.parse import urlparse

from loguru import logger
from walrus import Walrus

from group_membership import settings
from group_membership.network.cache.backends import (
    MemoryTaggedCacheBackend,
    RedisTaggedCacheBackend,
    TaggedCacheBackend,
)


def build_redis_client(redis_url: str | None = None) -> Walrus:
    # Parse REDIS_URL to extract components for Walrus
    parsed = urlparse(redis_url or settings.REDIS_URL)
    return Walrus(
        host=parsed.hostname or 'localhost',
        port=parsed.port or 6379,
        db=settings.REDIS_CACHE_DB,
        decode_responses=True,
        password=parsed.password,
    )


def build_tagged_cache(backend: str | None = None) -> TaggedCacheBackend:
    """
    Construct the cache shared by the resolvers. Call once at startup and
    inject the instance, never look it up from inside a resolver.
    """
    backend = backend or settings.CACHE_BACKEND
    logger.debug(f'building {backend} tagged cache')
    if backend == 'redis':
        return RedisTaggedCacheBackend(client=build_redis_client(), prefix=settings.CACHE_KEY_PREFIX)
    if backend == 'memory':
        return MemoryTaggedCacheBackend()
    raise ValueError(f'Unknown cache backend: {backend}')
