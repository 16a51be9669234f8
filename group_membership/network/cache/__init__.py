from group_membership.network.cache.backends import (
    MemoryTaggedCacheBackend,
    RedisTaggedCacheBackend,
    TaggedCacheBackend,
)
from group_membership.network.cache.cache import build_tagged_cache
from group_membership.network.cache.keys import CacheOperationEnum, build_cache_key, prepare_condition_values

__all__ = [
    'CacheOperationEnum',
    'MemoryTaggedCacheBackend',
    'RedisTaggedCacheBackend',
    'TaggedCacheBackend',
    'build_cache_key',
    'build_tagged_cache',
    'prepare_condition_values',
]
