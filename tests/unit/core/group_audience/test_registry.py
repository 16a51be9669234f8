"""Unit tests for the group audience field registry."""

import pytest

from group_membership.core.group_audience import GroupAudienceField, GroupAudienceFieldRegistry


@pytest.fixture
def registry(field_registry) -> GroupAudienceFieldRegistry:
    return field_registry


def names(fields):
    return sorted(field.field_name for field in fields)


class TestGroupAudienceField:
    def test_empty_target_bundles_match_everything(self):
        field = GroupAudienceField(field_name='og', host_entity_type='node', target_entity_type='group')
        assert field.targets_bundle('club')
        assert field.targets_bundle(None)

    def test_restricted_target_bundles(self):
        field = GroupAudienceField(
            field_name='og', host_entity_type='node', target_entity_type='group', target_bundles=['club']
        )
        assert field.targets_bundle('club')
        assert not field.targets_bundle('team')

    def test_hashable(self):
        field = GroupAudienceField(field_name='og', host_entity_type='node', target_entity_type='group')
        assert len({field, field.model_copy()}) == 1


class TestGroupAudienceFields:
    def test_all_fields_on_host(self, registry):
        assert names(registry.group_audience_fields('node')) == ['club_audience', 'group_audience', 'workspace']

    def test_by_target_type(self, registry):
        assert names(registry.group_audience_fields('node', target_entity_type='workspace')) == ['workspace']

    def test_by_target_bundle(self, registry):
        fields = registry.group_audience_fields('node', target_entity_type='group', target_bundle='team')
        assert names(fields) == ['group_audience']

    def test_by_host_bundle(self, registry):
        assert names(registry.group_audience_fields('article', 'news')) == ['clubs']
        assert registry.group_audience_fields('article', 'blog') == []

    def test_unknown_host(self, registry):
        assert registry.group_audience_fields('comment') == []


class TestRegistry:
    def test_list_all(self, registry):
        assert len(registry.list_group_audience_fields()) == 4

    def test_list_by_host_types(self, registry):
        assert names(registry.list_group_audience_fields(['article'])) == ['clubs']

    def test_register_replaces(self, registry):
        registry.register(
            GroupAudienceField(
                field_name='group_audience', host_entity_type='node', target_entity_type='group', target_bundles=['x']
            )
        )
        [field] = [f for f in registry.list_group_audience_fields(['node']) if f.field_name == 'group_audience']
        assert field.target_bundles == ('x',)

    def test_unregister(self, registry):
        registry.unregister('article', 'clubs', host_bundle='news')
        assert registry.list_group_audience_fields(['article']) == []
