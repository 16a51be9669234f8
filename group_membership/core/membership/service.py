from typing import Any, Iterable, List

from loguru import logger

from group_membership.common.exceptions import InvalidArgument
from group_membership.core.entity import Entity
from group_membership.core.membership.constants import (
    ALL_STATES,
    AUTHENTICATED_ROLE_NAME,
    DEFAULT_STATES,
    MEMBERSHIP_ENTITY_TYPE,
    MembershipStateEnum,
    MembershipTypeEnum,
)
from group_membership.core.membership.domains import Membership, RoleId
from group_membership.network.cache.backends import TaggedCacheBackend
from group_membership.network.cache.keys import CacheOperationEnum, build_cache_key, prepare_condition_values
from group_membership.network.cache.tags import (
    MEMBERSHIP_CACHE_TAG_PREFIX,
    MEMBERSHIP_LIST_CACHE_TAG,
    build_tag,
    build_tags,
    merge_tags,
)
from group_membership.network.store.base import Condition, EntityIdType, RecordStore


class MembershipService:
    """
    Resolves which groups a user belongs to, and which memberships a group has.

    Membership id lists are cached permanently and tagged with
    `membership_list` plus `membership:{id}` for every id in the list.
    Whoever creates, updates or deletes a membership must invalidate those
    tags (see `invalidate_membership_cache`), otherwise results go stale.
    """

    def __init__(self, record_store: RecordStore, cache: TaggedCacheBackend):
        """
        Args:
            record_store: Read access to memberships and group entities
            cache: Shared tagged cache, constructed once and injected
        """
        self.record_store = record_store
        self.cache = cache

    # ==================== User Memberships ====================

    def get_membership_ids(
        self, user_id: EntityIdType, states: Iterable[str] = DEFAULT_STATES
    ) -> List[EntityIdType]:
        """
        Ids of the user's memberships in the given states.
        An empty list of states means memberships in any state.
        """
        states = prepare_condition_values(states, default=ALL_STATES)
        cache_key = build_cache_key(CacheOperationEnum.GET_MEMBERSHIPS, user_id, states)

        membership_ids = self.cache.get(cache_key)
        if membership_ids is not None:
            logger.debug(f'membership cache hit: {cache_key}')
            return list(membership_ids)

        logger.debug(f'membership cache miss: {cache_key}')
        membership_ids = self.record_store.filter(
            MEMBERSHIP_ENTITY_TYPE,
            [
                Condition.eq('user_id', user_id),
                Condition.in_('state', states),
            ],
        )
        return self._cache_membership_ids(cache_key, membership_ids)

    def get_memberships(self, user_id: EntityIdType, states: Iterable[str] = DEFAULT_STATES) -> List[Membership]:
        return self._load_memberships(self.get_membership_ids(user_id, states))

    def get_membership(
        self, group: Entity, user_id: EntityIdType, states: Iterable[str] = DEFAULT_STATES
    ) -> Membership | None:
        """
        The user's membership in `group`, or None when there isn't one
        """
        for membership in self.get_memberships(user_id, states):
            if membership.is_for_group(group.entity_type, group.id):
                return membership

        return None

    def get_user_group_ids(
        self, user_id: EntityIdType, states: Iterable[str] = DEFAULT_STATES
    ) -> dict[str, set[EntityIdType]]:
        """
        Group ids of the user's memberships, keyed by group entity type
        """
        group_ids: dict[str, set[EntityIdType]] = {}
        for membership in self.get_memberships(user_id, states):
            group_ids.setdefault(membership.group_entity_type, set()).add(membership.group_id)

        return group_ids

    def get_user_groups(self, user_id: EntityIdType, states: Iterable[str] = DEFAULT_STATES) -> dict[str, List[Any]]:
        groups = {}
        for entity_type, entity_ids in self.get_user_group_ids(user_id, states).items():
            groups[entity_type] = list(self.record_store.load_many(entity_type, entity_ids).values())

        return groups

    # ==================== Group Memberships ====================

    def get_group_membership_ids_by_role_names(
        self,
        group: Entity,
        role_names: Iterable[str],
        states: Iterable[str] = DEFAULT_STATES,
    ) -> List[EntityIdType]:
        """
        Ids of the group's memberships holding any of `role_names`.

        When the authenticated role is requested every membership of the group
        qualifies, so all other role names are ignored and no role filter is
        applied.

        Raises:
            InvalidArgument: If `role_names` is empty
        """
        role_names = list(role_names)
        if not role_names:
            raise InvalidArgument(
                'The list of role names should not be empty.',
                context={'group_entity_type': group.entity_type, 'group_id': group.id},
            )

        retrieve_all_memberships = AUTHENTICATED_ROLE_NAME in role_names
        if retrieve_all_memberships:
            role_names = [AUTHENTICATED_ROLE_NAME]

        role_names = prepare_condition_values(role_names)
        states = prepare_condition_values(states, default=ALL_STATES)
        cache_key = build_cache_key(
            CacheOperationEnum.GET_GROUP_MEMBERSHIP_IDS_BY_ROLE_NAMES,
            group.entity_type,
            group.id,
            role_names,
            states,
        )

        membership_ids = self.cache.get(cache_key)
        if membership_ids is not None:
            logger.debug(f'membership cache hit: {cache_key}')
            return list(membership_ids)

        logger.debug(f'membership cache miss: {cache_key}')
        conditions = [
            Condition.eq('group_entity_type', group.entity_type),
            Condition.eq('group_id', group.id),
            Condition.in_('state', states),
        ]
        if not retrieve_all_memberships:
            # Entity types without bundles use the entity type as their bundle
            group_bundle = group.bundle or group.entity_type
            role_ids = [
                RoleId(group_entity_type=group.entity_type, group_bundle=group_bundle, role_name=role_name).id
                for role_name in role_names
            ]
            conditions.append(Condition.in_('roles', role_ids))

        membership_ids = self.record_store.filter(MEMBERSHIP_ENTITY_TYPE, conditions)
        return self._cache_membership_ids(cache_key, membership_ids)

    def get_group_memberships_by_role_names(
        self,
        group: Entity,
        role_names: Iterable[str],
        states: Iterable[str] = DEFAULT_STATES,
    ) -> List[Membership]:
        ids = self.get_group_membership_ids_by_role_names(group, role_names, states)
        return self._load_memberships(ids)

    # ==================== Aggregates ====================

    def is_member(self, group: Entity, user_id: EntityIdType, states: Iterable[str] = DEFAULT_STATES) -> bool:
        group_ids = self.get_user_group_ids(user_id, states)
        return group.id in group_ids.get(group.entity_type, set())

    def is_member_pending(self, group: Entity, user_id: EntityIdType) -> bool:
        return self.is_member(group, user_id, [MembershipStateEnum.PENDING.value])

    def is_member_blocked(self, group: Entity, user_id: EntityIdType) -> bool:
        return self.is_member(group, user_id, [MembershipStateEnum.BLOCKED.value])

    # ==================== Writes ====================

    def create_membership(
        self,
        group: Entity,
        user: Entity,
        membership_type: str = MembershipTypeEnum.DEFAULT.value,
    ) -> Membership:
        """
        Build a new membership of `user` in `group`. Nothing is persisted, the
        caller saves it and then calls `invalidate_membership_cache`.

        Raises:
            InvalidArgument: If `user` is not a user entity
        """
        if not user.is_user:
            raise InvalidArgument(
                f'Memberships can only be created for users, got {user.entity_type}',
                context={'entity_type': user.entity_type, 'entity_id': user.id},
            )

        return Membership(
            user_id=user.id,
            group_entity_type=group.entity_type,
            group_id=group.id,
            group_bundle=group.bundle,
            type=membership_type,
        )

    def invalidate_membership_cache(self, membership: Membership) -> int:
        """
        Invalidate cached results affected by a membership being created,
        updated or deleted.
        """
        tags = [MEMBERSHIP_LIST_CACHE_TAG]
        if membership.id is not None:
            tags.append(build_tag(MEMBERSHIP_CACHE_TAG_PREFIX, membership.id))
        return self.cache.invalidate_tags(tags)

    # ==================== Helpers ====================

    def _cache_membership_ids(self, cache_key: str, membership_ids: Iterable[EntityIdType]) -> List[EntityIdType]:
        membership_ids = sorted(membership_ids, key=str)
        # The list tag evicts this entry when a new membership is created
        tags = merge_tags([MEMBERSHIP_LIST_CACHE_TAG], build_tags(MEMBERSHIP_CACHE_TAG_PREFIX, membership_ids))
        self.cache.set(cache_key, membership_ids, tags)
        return list(membership_ids)

    def _load_memberships(self, membership_ids: List[EntityIdType]) -> List[Membership]:
        if not membership_ids:
            return []

        records = self.record_store.load_many(MEMBERSHIP_ENTITY_TYPE, membership_ids)
        # Memberships deleted since the ids were cached are skipped
        return [records[membership_id] for membership_id in membership_ids if membership_id in records]
