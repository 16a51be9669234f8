from group_membership.network.store.base import (
    Condition,
    ConditionOperatorEnum,
    EntityIdType,
    RecordStore,
    UnknownEntityKind,
)
from group_membership.network.store.memory import MemoryRecordStore
from group_membership.network.store.sql import SqlAlchemyRecordStore

__all__ = [
    'Condition',
    'ConditionOperatorEnum',
    'EntityIdType',
    'MemoryRecordStore',
    'RecordStore',
    'SqlAlchemyRecordStore',
    'UnknownEntityKind',
]
