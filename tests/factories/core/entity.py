import pytest
from polyfactory.factories.pydantic_factory import ModelFactory
from polyfactory.pytest_plugin import register_fixture

from group_membership.core.entity import Entity
from tests.factories.base import unique_id


@register_fixture(scope='session', autouse=True, name='entity_model_factory')
class EntityFactory(ModelFactory[Entity]):
    __model__ = Entity

    entity_type = 'group'
    id = unique_id
    bundle = None
    references = dict


def to_record(entity: Entity) -> dict:
    """Row shape a storage engine would hold: columns plus one column per reference field"""
    return {'id': entity.id, 'entity_type': entity.entity_type, 'bundle': entity.bundle, **entity.references}


class StoredEntityFactory:
    """
    Builds entities and optionally stores them so the record store knows they exist
    """

    def __init__(self, model_factory: type[EntityFactory], record_store):
        self.model_factory = model_factory
        self.record_store = record_store

    def build(self, entity_type: str = 'group', **kwargs) -> Entity:
        return self.model_factory.build(entity_type=entity_type, **kwargs)

    def create(self, entity_type: str = 'group', **kwargs) -> Entity:
        entity = self.build(entity_type, **kwargs)
        self.record_store.add(entity.entity_type, to_record(entity))
        return entity


@pytest.fixture(scope='function')
def entity_factory(entity_model_factory, record_store) -> StoredEntityFactory:
    return StoredEntityFactory(entity_model_factory, record_store)


@pytest.fixture(scope='function')
def user(entity_factory) -> Entity:
    return entity_factory.create('user', id='u1')
