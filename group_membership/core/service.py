from typing import Any, Iterable, List

from group_membership.core.entity import Entity
from group_membership.core.group_audience import GroupAudienceFieldProvider, GroupAudienceService
from group_membership.core.membership import Membership, MembershipService
from group_membership.core.membership.constants import DEFAULT_STATES, MembershipTypeEnum
from group_membership.network.cache import TaggedCacheBackend, build_tagged_cache
from group_membership.network.store import EntityIdType, RecordStore


class MembershipManager:
    """
    Single entry point over memberships and group content.

    Both underlying services share one record store and one tagged cache so
    that invalidating a tag through either of them is seen by both.
    """

    def __init__(
        self,
        membership_service: MembershipService,
        group_audience_service: GroupAudienceService,
    ):
        self.membership_service = membership_service
        self.group_audience_service = group_audience_service

    @classmethod
    def factory(
        cls,
        record_store: RecordStore,
        field_provider: GroupAudienceFieldProvider,
        cache: TaggedCacheBackend | None = None,
    ) -> 'MembershipManager':
        """
        Create a manager over the application's record store and field metadata.
        The cache is built from settings unless one is given.
        """
        cache = cache or build_tagged_cache()
        return cls(
            membership_service=MembershipService(record_store=record_store, cache=cache),
            group_audience_service=GroupAudienceService(
                record_store=record_store,
                field_provider=field_provider,
                cache=cache,
            ),
        )

    @property
    def cache(self) -> TaggedCacheBackend:
        return self.membership_service.cache

    # ==================== Users ====================

    def get_memberships(self, user_id: EntityIdType, states: Iterable[str] = DEFAULT_STATES) -> List[Membership]:
        return self.membership_service.get_memberships(user_id, states)

    def get_membership(
        self, group: Entity, user_id: EntityIdType, states: Iterable[str] = DEFAULT_STATES
    ) -> Membership | None:
        return self.membership_service.get_membership(group, user_id, states)

    def get_user_group_ids(
        self, user_id: EntityIdType, states: Iterable[str] = DEFAULT_STATES
    ) -> dict[str, set[EntityIdType]]:
        return self.membership_service.get_user_group_ids(user_id, states)

    def get_user_groups(self, user_id: EntityIdType, states: Iterable[str] = DEFAULT_STATES) -> dict[str, List[Any]]:
        return self.membership_service.get_user_groups(user_id, states)

    def is_member(self, group: Entity, user_id: EntityIdType, states: Iterable[str] = DEFAULT_STATES) -> bool:
        return self.membership_service.is_member(group, user_id, states)

    def is_member_pending(self, group: Entity, user_id: EntityIdType) -> bool:
        return self.membership_service.is_member_pending(group, user_id)

    def is_member_blocked(self, group: Entity, user_id: EntityIdType) -> bool:
        return self.membership_service.is_member_blocked(group, user_id)

    # ==================== Groups ====================

    def get_group_membership_ids_by_role_names(
        self, group: Entity, role_names: Iterable[str], states: Iterable[str] = DEFAULT_STATES
    ) -> List[EntityIdType]:
        return self.membership_service.get_group_membership_ids_by_role_names(group, role_names, states)

    def get_group_memberships_by_role_names(
        self, group: Entity, role_names: Iterable[str], states: Iterable[str] = DEFAULT_STATES
    ) -> List[Membership]:
        return self.membership_service.get_group_memberships_by_role_names(group, role_names, states)

    def create_membership(
        self, group: Entity, user: Entity, membership_type: str = MembershipTypeEnum.DEFAULT.value
    ) -> Membership:
        return self.membership_service.create_membership(group, user, membership_type)

    # ==================== Group Content ====================

    def get_group_ids(
        self, entity: Entity, group_entity_type: str | None = None, group_bundle: str | None = None
    ) -> dict[str, set[EntityIdType]]:
        return self.group_audience_service.get_group_ids(entity, group_entity_type, group_bundle)

    def get_groups(
        self, entity: Entity, group_entity_type: str | None = None, group_bundle: str | None = None
    ) -> dict[str, List[Any]]:
        return self.group_audience_service.get_groups(entity, group_entity_type, group_bundle)

    def get_group_count(
        self, entity: Entity, group_entity_type: str | None = None, group_bundle: str | None = None
    ) -> int:
        return self.group_audience_service.get_group_count(entity, group_entity_type, group_bundle)

    def get_group_content_ids(
        self, group: Entity, entity_types: Iterable[str] | None = None
    ) -> dict[str, set[EntityIdType]]:
        return self.group_audience_service.get_group_content_ids(group, entity_types)

    # ==================== Invalidation ====================

    def invalidate_membership_cache(self, membership: Membership) -> int:
        return self.membership_service.invalidate_membership_cache(membership)

    def invalidate_entity_cache(self, entity: Entity) -> int:
        return self.group_audience_service.invalidate_entity_cache(entity)
