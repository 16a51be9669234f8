import abc
from typing import Iterable

from loguru import logger

from group_membership.core.group_audience.domains import GroupAudienceField


class GroupAudienceFieldProvider(abc.ABC):
    """
    Field metadata collaborator: which reference fields point at groups
    """

    @abc.abstractmethod
    def list_group_audience_fields(self, host_entity_types: Iterable[str] | None = None) -> list[GroupAudienceField]:
        """Every group audience field in the system, optionally limited to some host types"""
        raise NotImplementedError

    def group_audience_fields(
        self,
        host_entity_type: str,
        host_bundle: str | None = None,
        target_entity_type: str | None = None,
        target_bundle: str | None = None,
    ) -> list[GroupAudienceField]:
        """
        Fields on the given host type/bundle, optionally limited to those that can
        reference the given group type and bundle
        """
        fields = []
        for field in self.list_group_audience_fields([host_entity_type]):
            if not field.is_on_host(host_entity_type, host_bundle):
                continue
            if target_entity_type and field.target_entity_type != target_entity_type:
                continue
            if target_bundle and not field.targets_bundle(target_bundle):
                continue
            fields.append(field)

        return fields


class GroupAudienceFieldRegistry(GroupAudienceFieldProvider):
    """
    In process provider, fields are registered at startup
    """

    def __init__(self, fields: Iterable[GroupAudienceField] = ()):
        self._fields: dict[tuple[str, str | None, str], GroupAudienceField] = {}
        for field in fields:
            self.register(field)

    def register(self, field: GroupAudienceField) -> None:
        key = (field.host_entity_type, field.host_bundle, field.field_name)
        if key in self._fields:
            logger.warning(f'replacing group audience field {field.host_entity_type}.{field.field_name}')
        self._fields[key] = field

    def unregister(self, host_entity_type: str, field_name: str, host_bundle: str | None = None) -> None:
        self._fields.pop((host_entity_type, host_bundle, field_name), None)

    def list_group_audience_fields(self, host_entity_types: Iterable[str] | None = None) -> list[GroupAudienceField]:
        if host_entity_types is None:
            return list(self._fields.values())

        host_entity_types = set(host_entity_types)
        return [field for field in self._fields.values() if field.host_entity_type in host_entity_types]
