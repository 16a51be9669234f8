import os
import sys

# Test Environment Overrides will override .env files
# THESE MUST BE SET BEFORE ANYTHING IS IMPORTED FROM group_membership
os.environ.setdefault('ENVIRONMENT', 'testing')
os.environ.setdefault('CACHE_BACKEND', 'memory')
os.environ.setdefault('LOG_LEVEL', 'DEBUG')

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from group_membership import setup

setup.run()

# ruff: noqa: E402
import pytest

from group_membership import settings
from group_membership.core.group_audience import GroupAudienceField, GroupAudienceFieldRegistry, GroupAudienceService
from group_membership.core.membership import MembershipService
from group_membership.core.service import MembershipManager
from group_membership.network.cache import MemoryTaggedCacheBackend
from group_membership.network.store import MemoryRecordStore

# Add fixtures here
pytest_plugins = [
    'tests.factories.core.entity',
    'tests.factories.core.membership',
]

# When group_membership is imported before the above patching, tests will use
# the wrong cache backend
if not settings.IS_TESTING:
    raise ValueError(
        'Patching of environment variables failed.\n'
        'Check all group_membership imports are delayed until after patching.\n'
    )


class CountingRecordStore(MemoryRecordStore):
    """
    Memory store that records every query it answers
    """

    def __init__(self):
        super().__init__()
        self.filter_calls = []
        self.load_calls = []

    def filter(self, entity_kind, conditions):
        conditions = list(conditions)
        self.filter_calls.append((entity_kind, conditions))
        return super().filter(entity_kind, conditions)

    def load_many(self, entity_kind, ids):
        ids = list(ids)
        self.load_calls.append((entity_kind, ids))
        return super().load_many(entity_kind, ids)

    def filter_count(self, entity_kind=None):
        return len([call for call in self.filter_calls if entity_kind is None or call[0] == entity_kind])


@pytest.fixture(scope='function')
def cache() -> MemoryTaggedCacheBackend:
    return MemoryTaggedCacheBackend()


@pytest.fixture(scope='function')
def record_store() -> CountingRecordStore:
    return CountingRecordStore()


@pytest.fixture(scope='function')
def field_registry() -> GroupAudienceFieldRegistry:
    """
    node.group_audience may reference any group
    node.club_audience and article.clubs may only reference club groups
    """
    return GroupAudienceFieldRegistry(
        [
            GroupAudienceField(field_name='group_audience', host_entity_type='node', target_entity_type='group'),
            GroupAudienceField(
                field_name='club_audience',
                host_entity_type='node',
                target_entity_type='group',
                target_bundles=('club',),
            ),
            GroupAudienceField(
                field_name='clubs',
                host_entity_type='article',
                host_bundle='news',
                target_entity_type='group',
                target_bundles=['club'],
            ),
            GroupAudienceField(field_name='workspace', host_entity_type='node', target_entity_type='workspace'),
        ]
    )


@pytest.fixture(scope='function')
def membership_service(record_store, cache) -> MembershipService:
    return MembershipService(record_store=record_store, cache=cache)


@pytest.fixture(scope='function')
def group_audience_service(record_store, field_registry, cache) -> GroupAudienceService:
    return GroupAudienceService(record_store=record_store, field_provider=field_registry, cache=cache)


@pytest.fixture(scope='function')
def manager(record_store, field_registry, cache) -> MembershipManager:
    return MembershipManager.factory(record_store=record_store, field_provider=field_registry, cache=cache)
