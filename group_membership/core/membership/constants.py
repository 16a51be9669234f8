from group_membership.common.enum import BaseEnum

MEMBERSHIP_ENTITY_TYPE = 'membership'

# Role shared by every member of a group, whatever finer roles they hold
AUTHENTICATED_ROLE_NAME = 'authenticated'
ROLE_ID_DELIMITER = '-'


class MembershipStateEnum(BaseEnum):
    ACTIVE = 'active'
    PENDING = 'pending'
    BLOCKED = 'blocked'


class MembershipTypeEnum(BaseEnum):
    DEFAULT = 'default'
    ADMIN_CREATED = 'admin_created'


ALL_STATES = MembershipStateEnum.values()
DEFAULT_STATES = (MembershipStateEnum.ACTIVE.value,)
