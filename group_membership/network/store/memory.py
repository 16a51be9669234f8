from collections.abc import Mapping
from typing import Any, Iterable

from group_membership.network.store.base import Condition, EntityIdType, RecordStore, UnknownEntityKind

_COLLECTION_TYPES = (list, tuple, set, frozenset)


def read_field(record: Any, field: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(field)
    return getattr(record, field, None)


def matches(record: Any, condition: Condition) -> bool:
    field_value = read_field(record, condition.field)
    if isinstance(field_value, _COLLECTION_TYPES):
        if condition.is_in:
            return bool(set(field_value) & set(condition.value))
        return condition.value in field_value

    if condition.is_in:
        return field_value in condition.value
    return field_value == condition.value


class MemoryRecordStore(RecordStore):
    """
    Dict backed record store. Records can be mappings or any object exposing
    its fields as attributes (domains, ORM instances).
    """

    def __init__(self, strict: bool = False):
        self._records: dict[str, dict[EntityIdType, Any]] = {}
        # When strict, unknown kinds raise instead of behaving as empty
        self.strict = strict

    def add(self, entity_kind: str, *records: Any) -> None:
        kind_records = self._records.setdefault(entity_kind, {})
        for record in records:
            record_id = read_field(record, self.ID_FIELD)
            if record_id is None:
                raise ValueError(f'{entity_kind} record has no {self.ID_FIELD}')
            kind_records[record_id] = record

    def remove(self, entity_kind: str, *ids: EntityIdType) -> None:
        kind_records = self._records.get(entity_kind, {})
        for record_id in ids:
            kind_records.pop(record_id, None)

    def _get_kind(self, entity_kind: str) -> dict[EntityIdType, Any]:
        if entity_kind not in self._records and self.strict:
            raise UnknownEntityKind(f'No records registered for {entity_kind}')
        return self._records.get(entity_kind, {})

    def filter(self, entity_kind: str, conditions: Iterable[Condition]) -> set[EntityIdType]:
        conditions = list(conditions)
        return {
            record_id
            for record_id, record in self._get_kind(entity_kind).items()
            if all(matches(record, condition) for condition in conditions)
        }

    def load_many(self, entity_kind: str, ids: Iterable[EntityIdType]) -> dict[EntityIdType, Any]:
        kind_records = self._get_kind(entity_kind)
        return {record_id: kind_records[record_id] for record_id in ids if record_id in kind_records}
