from typing import Any, Iterable, List

from loguru import logger

from group_membership.common.exceptions import InvalidArgument
from group_membership.core.entity import Entity
from group_membership.core.group_audience.registry import GroupAudienceFieldProvider
from group_membership.network.cache.backends import TaggedCacheBackend
from group_membership.network.cache.keys import CacheOperationEnum, build_cache_key
from group_membership.network.cache.tags import list_tag, merge_tags
from group_membership.network.store.base import Condition, EntityIdType, RecordStore


class GroupAudienceService:
    """
    Resolves the groups a piece of content references through its group
    audience fields, and the content referencing a group.

    Users never go through here: they relate to groups through memberships,
    see MembershipService.
    """

    def __init__(
        self,
        record_store: RecordStore,
        field_provider: GroupAudienceFieldProvider,
        cache: TaggedCacheBackend,
    ):
        self.record_store = record_store
        self.field_provider = field_provider
        self.cache = cache

    def get_group_ids(
        self,
        entity: Entity,
        group_entity_type: str | None = None,
        group_bundle: str | None = None,
    ) -> dict[str, set[EntityIdType]]:
        """
        Ids of the existing groups `entity` references, keyed by group entity type.

        References to groups that no longer exist are dropped. The cached result
        is tagged with each group type's list tag and the entity's own tags, so
        deleting a group or changing the entity evicts it.

        Args:
            entity: Any non user entity
            group_entity_type: Only return groups of this entity type
            group_bundle: Only return groups of this bundle

        Raises:
            InvalidArgument: If `entity` is a user
        """
        if entity.is_user:
            raise InvalidArgument(
                'Group ids cannot be resolved for user entities, use MembershipService.get_user_group_ids instead.',
                context={'entity_id': entity.id},
            )

        cache_key = build_cache_key(
            CacheOperationEnum.GET_GROUP_IDS,
            entity.entity_type,
            entity.id,
            group_entity_type,
            group_bundle,
        )
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f'group audience cache hit: {cache_key}')
            return {entity_type: set(ids) for entity_type, ids in cached.items()}

        logger.debug(f'group audience cache miss: {cache_key}')
        group_ids: dict[str, set[EntityIdType]] = {}
        tags = list(entity.cache_tags)

        fields = self.field_provider.group_audience_fields(
            entity.entity_type, entity.bundle, group_entity_type, group_bundle
        )
        for field in fields:
            target_ids = entity.get_reference_ids(field.field_name)
            if not target_ids:
                # Entity doesn't reference any groups through this field
                continue

            # Referenced ids may be orphaned, only keep groups that still exist
            conditions = [Condition.in_(RecordStore.ID_FIELD, target_ids)]
            if group_bundle:
                conditions.append(Condition.eq(RecordStore.BUNDLE_FIELD, group_bundle))
            existing_ids = self.record_store.filter(field.target_entity_type, conditions)

            # Evicted when any group of the target type is deleted
            tags = merge_tags(tags, [list_tag(field.target_entity_type)])
            group_ids.setdefault(field.target_entity_type, set()).update(existing_ids)

        self.cache.set(
            cache_key,
            {entity_type: sorted(ids, key=str) for entity_type, ids in group_ids.items()},
            tags,
        )
        return group_ids

    def get_groups(
        self,
        entity: Entity,
        group_entity_type: str | None = None,
        group_bundle: str | None = None,
    ) -> dict[str, List[Any]]:
        groups = {}
        for entity_type, entity_ids in self.get_group_ids(entity, group_entity_type, group_bundle).items():
            groups[entity_type] = list(self.record_store.load_many(entity_type, entity_ids).values())

        return groups

    def get_group_count(
        self,
        entity: Entity,
        group_entity_type: str | None = None,
        group_bundle: str | None = None,
    ) -> int:
        return sum(len(ids) for ids in self.get_group_ids(entity, group_entity_type, group_bundle).values())

    def get_group_content_ids(
        self, group: Entity, entity_types: Iterable[str] | None = None
    ) -> dict[str, set[EntityIdType]]:
        """
        Ids of the entities referencing `group` through a group audience field,
        keyed by entity type. Not cached.

        Args:
            group: The referenced group
            entity_types: Only look at content of these entity types
        """
        group_content: dict[str, set[EntityIdType]] = {}

        host_entity_types = list(entity_types) if entity_types else None
        fields = [
            field
            for field in self.field_provider.list_group_audience_fields(host_entity_types)
            if field.target_entity_type == group.entity_type and field.targets_bundle(group.bundle)
        ]

        queried = set()
        for field in fields:
            # The same field can be attached to several bundles of its host type
            if (field.host_entity_type, field.field_name) in queried:
                continue
            queried.add((field.host_entity_type, field.field_name))

            content_ids = self.record_store.filter(
                field.host_entity_type,
                [Condition.eq(field.field_name, group.id)],
            )
            group_content.setdefault(field.host_entity_type, set()).update(content_ids)

        return group_content

    def invalidate_entity_cache(self, entity: Entity) -> int:
        """
        Invalidate cached results affected by `entity` changing or being deleted.
        Call it for group deletions and for changes to group content.
        """
        return self.cache.invalidate_tags([*entity.cache_tags, entity.list_cache_tag])
