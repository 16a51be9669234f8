from typing import Optional

from pydantic import Field

from group_membership.common.domain import BaseDomain
from group_membership.core.entity.constants import USER_ENTITY_TYPE
from group_membership.network.cache.tags import build_tag, list_tag
from group_membership.network.store.base import EntityIdType


class Entity(BaseDomain):
    """
    Any stored entity: a group, a piece of group content or a user.

    `references` holds the target ids of every entity reference field on the
    entity, keyed by field name. Ids may be stale, the referenced entity is
    not guaranteed to still exist.
    """

    entity_type: str
    id: EntityIdType
    bundle: Optional[str] = None
    references: dict[str, list[EntityIdType]] = Field(default_factory=dict)

    @property
    def is_user(self) -> bool:
        return self.entity_type == USER_ENTITY_TYPE

    @property
    def cache_tags(self) -> list[str]:
        """Tags to invalidate when this entity changes"""
        return [build_tag(self.entity_type, self.id)]

    @property
    def list_cache_tag(self) -> str:
        return list_tag(self.entity_type)

    def get_reference_ids(self, field_name: str) -> list[EntityIdType]:
        return [target_id for target_id in self.references.get(field_name, []) if target_id is not None]
