import abc
import json
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable

from loguru import logger
from redis.exceptions import RedisError
from walrus import Walrus


class TaggedCacheBackend(abc.ABC):
    """
    Key/value store where each entry lives until one of its tags is invalidated.

    `get` returns None for a key that was never set or has been invalidated,
    so cached values themselves must never be None. An empty list or mapping
    is a legitimate cached result.
    """

    @abc.abstractmethod
    def get(self, key: str) -> Any | None:
        raise NotImplementedError

    @abc.abstractmethod
    def set(self, key: str, value: Any, tags: Iterable[str] = ()) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def invalidate(self, tag: str) -> int:
        """Evicts every entry carrying `tag`, returns the number of evicted keys"""
        raise NotImplementedError

    def invalidate_tags(self, tags: Iterable[str]) -> int:
        return sum(self.invalidate(tag) for tag in set(tags))

    @abc.abstractmethod
    def flush(self) -> None:
        raise NotImplementedError


@dataclass
class CacheEntry:
    key: str
    value: Any
    tags: frozenset[str] = field(default_factory=frozenset)


class MemoryTaggedCacheBackend(TaggedCacheBackend):
    """
    Process local backend. Flush between requests for request scoped caching.
    """

    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}
        self._tag_index: dict[str, set[str]] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        return entry.value if entry else None

    def set(self, key: str, value: Any, tags: Iterable[str] = ()) -> None:
        if value is None:
            raise ValueError('None is reserved for cache misses')

        entry = CacheEntry(key=key, value=value, tags=frozenset(tags))
        with self._lock:
            self._unindex(key)
            self._entries[key] = entry
            for tag in entry.tags:
                self._tag_index.setdefault(tag, set()).add(key)

    def invalidate(self, tag: str) -> int:
        with self._lock:
            keys = self._tag_index.pop(tag, set())
            for key in keys:
                self._unindex(key)
                self._entries.pop(key, None)
        if keys:
            logger.debug(f'cache tag {tag} invalidated {len(keys)} entries')
        return len(keys)

    def flush(self) -> None:
        with self._lock:
            self._entries.clear()
            self._tag_index.clear()

    def _unindex(self, key: str) -> None:
        entry = self._entries.get(key)
        if entry is None:
            return
        for tag in entry.tags:
            keys = self._tag_index.get(tag)
            if keys is not None:
                keys.discard(key)
                if not keys:
                    del self._tag_index[tag]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


class RedisTaggedCacheBackend(TaggedCacheBackend):
    """
    Redis backed tagged cache. Values are stored as JSON. Each tag is a redis
    set of the cache keys carrying it, and each entry keeps the set of its own
    tags so invalidating one tag also unlists the entry from the others.

    Invalidation only removes the keys it read from the tag set, a key tagged
    concurrently stays listed and is evicted by the next invalidation.

    Redis being unavailable or holding an undecodable value must never fail a
    query, so those errors are logged and treated as a miss (reads) or skipped
    (writes).
    """

    KEY_FORMAT = '{prefix}::entry::{key}'
    ENTRY_TAGS_FORMAT = '{prefix}::entry_tags::{key}'
    TAG_FORMAT = '{prefix}::tag::{tag}'
    PATTERN_FORMAT = '{prefix}::*'

    def __init__(self, client: Walrus, prefix: str):
        self.client = client
        self.prefix = prefix

    def _entry_key(self, key: str) -> str:
        return self.KEY_FORMAT.format(prefix=self.prefix, key=key)

    def _entry_tags_key(self, key: str) -> str:
        return self.ENTRY_TAGS_FORMAT.format(prefix=self.prefix, key=key)

    def _tag_key(self, tag: str) -> str:
        return self.TAG_FORMAT.format(prefix=self.prefix, tag=tag)

    def get(self, key: str) -> Any | None:
        try:
            raw = self.client.get(self._entry_key(key))
        except RedisError as e:
            logger.warning(f'cache read failed for {key}, treating as miss: {e}')
            return None

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning(f'cache entry {key} is not valid JSON, treating as miss: {e}')
            return None

    def set(self, key: str, value: Any, tags: Iterable[str] = ()) -> None:
        if value is None:
            raise ValueError('None is reserved for cache misses')

        entry_tags_key = self._entry_tags_key(key)
        tag_keys = {self._tag_key(tag) for tag in tags}
        try:
            # Tags the previous value carried but this one doesn't
            stale_tag_keys = set(self.client.smembers(entry_tags_key)) - tag_keys

            pipe = self.client.pipeline()
            pipe.set(self._entry_key(key), json.dumps(value))
            for tag_key in stale_tag_keys:
                pipe.srem(tag_key, key)
            pipe.delete(entry_tags_key)
            if tag_keys:
                pipe.sadd(entry_tags_key, *tag_keys)
            for tag_key in tag_keys:
                pipe.sadd(tag_key, key)
            pipe.execute()
        except RedisError as e:
            logger.warning(f'cache write failed for {key}: {e}')

    def invalidate(self, tag: str) -> int:
        tag_key = self._tag_key(tag)
        try:
            keys = sorted(self.client.smembers(tag_key))
            if not keys:
                return 0

            pipe = self.client.pipeline(transaction=False)
            for key in keys:
                pipe.smembers(self._entry_tags_key(key))
            entry_tag_keys = pipe.execute()

            pipe = self.client.pipeline()
            pipe.delete(*[self._entry_key(key) for key in keys])
            for key, other_tag_keys in zip(keys, entry_tag_keys):
                pipe.delete(self._entry_tags_key(key))
                for other_tag_key in {tag_key, *other_tag_keys}:
                    pipe.srem(other_tag_key, key)
            pipe.execute()
        except RedisError as e:
            logger.warning(f'cache invalidation failed for tag {tag}: {e}')
            return 0

        logger.debug(f'cache tag {tag} invalidated {len(keys)} entries')
        return len(keys)

    def flush(self) -> None:
        try:
            keys = list(self.client.scan_iter(match=self.PATTERN_FORMAT.format(prefix=self.prefix)))
            if keys:
                self.client.delete(*keys)
        except RedisError as e:
            logger.warning(f'cache flush failed: {e}')
