from group_membership.core.entity.constants import USER_ENTITY_TYPE
from group_membership.core.entity.domains import Entity

__all__ = [
    'USER_ENTITY_TYPE',
    'Entity',
]
