from typing import Optional

from pydantic import Field

from group_membership.common.domain import BaseDomain, FrozenDomain
from group_membership.core.membership.constants import (
    AUTHENTICATED_ROLE_NAME,
    ROLE_ID_DELIMITER,
    MembershipStateEnum,
    MembershipTypeEnum,
)
from group_membership.network.store.base import EntityIdType


class RoleId(FrozenDomain):
    group_entity_type: str
    group_bundle: str
    role_name: str

    @property
    def id(self) -> str:
        """Stored form, e.g. node-club-administrator"""
        return ROLE_ID_DELIMITER.join([self.group_entity_type, self.group_bundle, self.role_name])

    @property
    def is_authenticated(self) -> bool:
        return self.role_name == AUTHENTICATED_ROLE_NAME

    @classmethod
    def parse(cls, role_id: str) -> 'RoleId':
        """
        Splits on the first two delimiters, so the role name may contain '-'
        but group entity types and bundles must not.
        """
        parts = role_id.split(ROLE_ID_DELIMITER, 2)
        if len(parts) != 3:
            raise ValueError(f'Malformed role id: {role_id}')
        group_entity_type, group_bundle, role_name = parts
        return cls(group_entity_type=group_entity_type, group_bundle=group_bundle, role_name=role_name)

    def __str__(self) -> str:
        return self.id


class Membership(BaseDomain):
    """
    Relation between one user and one group. `id` stays None until the
    membership is persisted by whoever owns membership storage.
    """

    id: Optional[EntityIdType] = None
    user_id: EntityIdType
    group_entity_type: str
    group_id: EntityIdType
    group_bundle: Optional[str] = None
    state: MembershipStateEnum = Field(default=MembershipStateEnum.ACTIVE, validate_default=True)
    roles: list[str] = Field(default_factory=list)
    type: str = MembershipTypeEnum.DEFAULT.value

    @property
    def role_ids(self) -> list[RoleId]:
        return [RoleId.parse(role) for role in self.roles]

    def has_role(self, role_name: str) -> bool:
        return any(role_id.role_name == role_name for role_id in self.role_ids)

    def is_for_group(self, group_entity_type: str, group_id: EntityIdType) -> bool:
        return self.group_entity_type == group_entity_type and self.group_id == group_id
