"""
Cache key derivation for resolver results.

Two calls that ask the same logical question must land on the same key, so
every set-like argument (states, role names) is deduplicated and sorted before
it becomes part of the key. The operation is always the first segment, which
keeps keys of different resolvers apart.
"""

from typing import Any, Iterable, Sequence

from group_membership.common.enum import BaseEnum

KEY_SEGMENT_DELIMITER = ':'
KEY_VALUE_DELIMITER = '|'


class CacheOperationEnum(BaseEnum):
    GET_MEMBERSHIPS = 'get_memberships'
    GET_GROUP_MEMBERSHIP_IDS_BY_ROLE_NAMES = 'get_group_membership_ids_by_role_names'
    GET_GROUP_IDS = 'get_group_ids'


def _to_key_value(value: Any) -> str:
    if value is None:
        return ''
    return str(value)


def prepare_condition_values(values: Iterable[Any] | None, default: Sequence[Any] | None = None) -> list[str]:
    """
    Normalizes an IN-style filter so it can be used both in a cache key and a query.

    Falls back to `default` when `values` is empty and a default is given,
    then drops duplicates and sorts ascending.
    """
    values = list(values or [])
    if not values and default is not None:
        values = list(default)
    return sorted({_to_key_value(value) for value in values})


def build_cache_key(operation: CacheOperationEnum, *segments: Any) -> str:
    """
    build_cache_key(GET_MEMBERSHIPS, 'u1', ['pending', 'active'])
        -> 'get_memberships:u1:active|pending'
    """
    parts = [_to_key_value(operation)]
    for segment in segments:
        if isinstance(segment, (list, tuple, set, frozenset)):
            parts.append(KEY_VALUE_DELIMITER.join(prepare_condition_values(segment)))
        else:
            parts.append(_to_key_value(segment))
    return KEY_SEGMENT_DELIMITER.join(parts)
