from group_membership.common.exceptions import InternalException, InvalidArgument
from group_membership.core.entity import Entity
from group_membership.core.group_audience import GroupAudienceField, GroupAudienceFieldRegistry
from group_membership.core.membership import Membership, MembershipStateEnum, RoleId
from group_membership.core.service import MembershipManager

__all__ = [
    'Entity',
    'GroupAudienceField',
    'GroupAudienceFieldRegistry',
    'InternalException',
    'InvalidArgument',
    'Membership',
    'MembershipManager',
    'MembershipStateEnum',
    'RoleId',
]
