"""Unit tests for GroupAudienceService."""

import pytest

from group_membership.common.exceptions import InvalidArgument


@pytest.fixture
def groups(entity_factory):
    return {
        'chess': entity_factory.create('group', id=1, bundle='club'),
        'rowing': entity_factory.create('group', id=2, bundle='team'),
        'books': entity_factory.create('group', id=3, bundle='club'),
    }


@pytest.fixture
def workspace(entity_factory):
    return entity_factory.create('workspace', id='ws-1')


@pytest.fixture
def node(entity_factory, groups, workspace):
    return entity_factory.create(
        'node',
        id=100,
        bundle='page',
        references={
            'group_audience': [1, 2, 404],
            'club_audience': [3],
            'workspace': [workspace.id],
        },
    )


class TestGetGroupIds:
    def test_orphans_are_dropped(self, group_audience_service, entity_factory, groups):
        # Group 2 was deleted but the reference remains
        entity = entity_factory.build('node', bundle='page', references={'group_audience': [1, 2, 3]})
        group_audience_service.record_store.remove('group', 2)

        assert group_audience_service.get_group_ids(entity) == {'group': {1, 3}}

    def test_merges_fields_targeting_the_same_type(self, group_audience_service, node, workspace):
        assert group_audience_service.get_group_ids(node) == {'group': {1, 2, 3}, 'workspace': {workspace.id}}

    def test_filter_by_group_type(self, group_audience_service, node, workspace):
        assert group_audience_service.get_group_ids(node, 'workspace') == {'workspace': {workspace.id}}

    def test_filter_by_group_bundle(self, group_audience_service, node):
        assert group_audience_service.get_group_ids(node, 'group', 'club') == {'group': {1, 3}}

    def test_fields_without_references_are_skipped(self, group_audience_service, record_store, entity_factory, groups):
        entity = entity_factory.build('node', bundle='page', references={'group_audience': [2]})

        assert group_audience_service.get_group_ids(entity) == {'group': {2}}
        assert record_store.filter_count() == 1

    def test_no_references(self, group_audience_service, entity_factory):
        entity = entity_factory.build('node', bundle='page')
        assert group_audience_service.get_group_ids(entity) == {}

    def test_host_bundle_restricts_fields(self, group_audience_service, entity_factory, groups):
        news = entity_factory.build('article', bundle='news', references={'clubs': [1]})
        blog = entity_factory.build('article', bundle='blog', references={'clubs': [1]})

        assert group_audience_service.get_group_ids(news) == {'group': {1}}
        assert group_audience_service.get_group_ids(blog) == {}

    def test_user_entity_rejected(self, group_audience_service, user):
        with pytest.raises(InvalidArgument):
            group_audience_service.get_group_ids(user)

    def test_cached(self, group_audience_service, record_store, node):
        first = group_audience_service.get_group_ids(node)
        calls = record_store.filter_count()
        second = group_audience_service.get_group_ids(node)

        assert first == second
        assert record_store.filter_count() == calls

    def test_empty_result_is_cached(self, group_audience_service, cache, entity_factory):
        entity = entity_factory.build('node', bundle='page')
        group_audience_service.get_group_ids(entity)

        assert len(cache) == 1

    def test_filters_are_part_of_the_key(self, group_audience_service, node, workspace):
        group_audience_service.get_group_ids(node, 'workspace')
        assert group_audience_service.get_group_ids(node) == {'group': {1, 2, 3}, 'workspace': {workspace.id}}

    def test_group_deletion_invalidates(self, group_audience_service, record_store, node, groups):
        assert group_audience_service.get_group_ids(node, 'group') == {'group': {1, 2, 3}}

        record_store.remove('group', 3)
        group_audience_service.invalidate_entity_cache(groups['books'])

        assert group_audience_service.get_group_ids(node, 'group') == {'group': {1, 2}}

    def test_source_entity_change_invalidates(self, group_audience_service, cache, entity_factory, groups):
        entity = entity_factory.build('node', id=7, bundle='page', references={'group_audience': [1]})
        group_audience_service.get_group_ids(entity)

        assert cache.invalidate('node:7') == 1

    def test_unrelated_list_tag_keeps_entry(self, group_audience_service, cache, entity_factory, groups):
        entity = entity_factory.build('node', id=8, bundle='page', references={'group_audience': [1]})
        group_audience_service.get_group_ids(entity)

        assert cache.invalidate('workspace_list') == 0
        assert cache.invalidate('group_list') == 1


class TestHydrationAndCount:
    def test_get_groups(self, group_audience_service, node, workspace):
        groups = group_audience_service.get_groups(node)

        assert sorted(group['id'] for group in groups['group']) == [1, 2, 3]
        assert [group['id'] for group in groups['workspace']] == [workspace.id]

    def test_get_group_count(self, group_audience_service, node):
        assert group_audience_service.get_group_count(node) == 4
        assert group_audience_service.get_group_count(node, 'group', 'team') == 1

    def test_get_group_count_none(self, group_audience_service, entity_factory):
        assert group_audience_service.get_group_count(entity_factory.build('node', bundle='page')) == 0


class TestGetGroupContentIds:
    def test_unrestricted_and_restricted_fields(self, group_audience_service, entity_factory, node, groups):
        entity_factory.create('node', id=101, bundle='page', references={'club_audience': [1]})
        entity_factory.create('article', id=200, bundle='news', references={'clubs': [1, 3]})

        assert group_audience_service.get_group_content_ids(groups['chess']) == {'node': {100, 101}, 'article': {200}}

    def test_bundle_restriction_excludes_fields(self, group_audience_service, entity_factory, node, groups):
        # club_audience and article.clubs only target clubs, rowing is a team
        entity_factory.create('article', id=201, bundle='news', references={'clubs': [2]})

        assert group_audience_service.get_group_content_ids(groups['rowing']) == {'node': {100}}

    def test_filter_by_entity_types(self, group_audience_service, entity_factory, node, groups):
        entity_factory.create('article', id=202, bundle='news', references={'clubs': [3]})

        assert group_audience_service.get_group_content_ids(groups['books'], ['article']) == {'article': {202}}

    def test_no_matching_fields(self, group_audience_service, entity_factory):
        calendar = entity_factory.build('calendar', id=1)
        assert group_audience_service.get_group_content_ids(calendar) == {}

    def test_matching_field_without_content(self, group_audience_service, workspace):
        assert group_audience_service.get_group_content_ids(workspace) == {'node': set()}
