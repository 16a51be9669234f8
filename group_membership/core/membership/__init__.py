from group_membership.core.membership.constants import (
    ALL_STATES,
    AUTHENTICATED_ROLE_NAME,
    MEMBERSHIP_ENTITY_TYPE,
    MembershipStateEnum,
    MembershipTypeEnum,
)
from group_membership.core.membership.domains import Membership, RoleId
from group_membership.core.membership.service import MembershipService

__all__ = [
    'ALL_STATES',
    'AUTHENTICATED_ROLE_NAME',
    'MEMBERSHIP_ENTITY_TYPE',
    'Membership',
    'MembershipService',
    'MembershipStateEnum',
    'MembershipTypeEnum',
    'RoleId',
]
