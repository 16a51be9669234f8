from group_membership.core.group_audience.domains import GroupAudienceField
from group_membership.core.group_audience.registry import GroupAudienceFieldProvider, GroupAudienceFieldRegistry
from group_membership.core.group_audience.service import GroupAudienceService

__all__ = [
    'GroupAudienceField',
    'GroupAudienceFieldProvider',
    'GroupAudienceFieldRegistry',
    'GroupAudienceService',
]
