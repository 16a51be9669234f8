from typing import Any, Iterable

MEMBERSHIP_CACHE_TAG_PREFIX = 'membership'
LIST_TAG_SUFFIX = '_list'


def build_tag(prefix: str, entity_id: Any) -> str:
    return f'{prefix}:{entity_id}'


def build_tags(prefix: str, entity_ids: Iterable[Any]) -> list[str]:
    """One invalidation tag per record, e.g. membership:42"""
    return [build_tag(prefix, entity_id) for entity_id in entity_ids]


def list_tag(entity_kind: str) -> str:
    """Invalidated whenever a record of this kind is inserted or deleted"""
    return f'{entity_kind}{LIST_TAG_SUFFIX}'


def merge_tags(*tag_sets: Iterable[str]) -> list[str]:
    merged: set[str] = set()
    for tags in tag_sets:
        merged.update(tags)
    return sorted(merged)


MEMBERSHIP_LIST_CACHE_TAG = list_tag(MEMBERSHIP_CACHE_TAG_PREFIX)
