import abc
from typing import Any, Iterable, Mapping, TypeAlias

from group_membership.common.domain import BaseDomain
from group_membership.common.enum import BaseEnum
from group_membership.common.exceptions import InternalException

# Entity ids are whatever the underlying storage uses, usually str or int
EntityIdType: TypeAlias = str | int


class ConditionOperatorEnum(BaseEnum):
    # Against a multi valued field EQ means "contains"
    EQ = 'eq'
    # Against a multi valued field IN means "intersects"
    IN = 'in'


class Condition(BaseDomain):
    field: str
    value: Any
    operator: ConditionOperatorEnum = ConditionOperatorEnum.EQ

    @classmethod
    def eq(cls, field: str, value: Any) -> 'Condition':
        return cls(field=field, value=value, operator=ConditionOperatorEnum.EQ)

    @classmethod
    def in_(cls, field: str, values: Iterable[Any]) -> 'Condition':
        return cls(field=field, value=list(values), operator=ConditionOperatorEnum.IN)

    @property
    def is_in(self) -> bool:
        return self.operator == ConditionOperatorEnum.IN


class UnknownEntityKind(InternalException):
    """
    Raised when a record store has no storage for the requested entity kind
    """

    default_detail = 'Unknown entity kind.'
    default_code = 'unknown_entity_kind'


class RecordStore(abc.ABC):
    """
    Narrow read interface onto the entity storage. Conditions are combined
    with a logical AND. Storage failures propagate to the caller unchanged.
    """

    ID_FIELD = 'id'
    BUNDLE_FIELD = 'bundle'

    @abc.abstractmethod
    def filter(self, entity_kind: str, conditions: Iterable[Condition]) -> set[EntityIdType]:
        raise NotImplementedError

    @abc.abstractmethod
    def load_many(self, entity_kind: str, ids: Iterable[EntityIdType]) -> Mapping[EntityIdType, Any]:
        raise NotImplementedError
