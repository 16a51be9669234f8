from typing import Optional

from pydantic import Field

from group_membership.common.domain import FrozenDomain


class GroupAudienceField(FrozenDomain):
    """
    Reference field on a content entity type/bundle pointing at a group entity type.
    An empty `target_bundles` means the field may reference groups of any bundle.
    """

    field_name: str
    host_entity_type: str
    host_bundle: Optional[str] = None
    target_entity_type: str
    target_bundles: tuple[str, ...] = Field(default_factory=tuple)

    def targets_bundle(self, bundle: str | None) -> bool:
        return not self.target_bundles or bundle in self.target_bundles

    def is_on_host(self, host_entity_type: str, host_bundle: str | None = None) -> bool:
        if self.host_entity_type != host_entity_type:
            return False
        # A field attached to every bundle of its host type has no host bundle
        return host_bundle is None or self.host_bundle is None or self.host_bundle == host_bundle
