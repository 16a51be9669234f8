from typing import Any, Iterable, Type

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import DeclarativeBase, InstrumentedAttribute, RelationshipProperty, Session, sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from group_membership.common.exceptions import InvalidArgument
from group_membership.network.store.base import Condition, EntityIdType, RecordStore, UnknownEntityKind


class SqlAlchemyRecordStore(RecordStore):
    """
    Record store over SQLAlchemy declarative models, one model per entity kind.

    Scalar columns are compared with == / IN. Relationship collections
    (e.g. a membership's roles, a node's group references) are compared
    against the related model's primary key with .any().

    Loaded instances are converted in this order:
        instance.to_domain() when the model defines it
        Model.__read_domain__.model_validate(instance) when set
        otherwise the detached instance itself
    """

    def __init__(self, session_factory: sessionmaker[Session], models: dict[str, Type[DeclarativeBase]]):
        self.session_factory = session_factory
        self.models = models

    def _get_model(self, entity_kind: str) -> Type[DeclarativeBase]:
        model = self.models.get(entity_kind)
        if model is None:
            raise UnknownEntityKind(f'No model registered for {entity_kind}', context={'entity_kind': entity_kind})
        return model

    def _get_attribute(self, model: Type[DeclarativeBase], field: str) -> InstrumentedAttribute[Any]:
        attribute = getattr(model, field, None)
        if not isinstance(attribute, InstrumentedAttribute):
            raise InvalidArgument(f'{model.__name__} has no mapped field {field}')
        return attribute

    def _to_clause(self, model: Type[DeclarativeBase], condition: Condition) -> ColumnElement[bool]:
        attribute = self._get_attribute(model, condition.field)
        prop = attribute.property
        if isinstance(prop, RelationshipProperty):
            related_pk = prop.mapper.primary_key[0]
            if condition.is_in:
                return attribute.any(related_pk.in_(list(condition.value)))
            return attribute.any(related_pk == condition.value)

        if condition.is_in:
            return attribute.in_(list(condition.value))
        return attribute == condition.value

    def filter(self, entity_kind: str, conditions: Iterable[Condition]) -> set[EntityIdType]:
        model = self._get_model(entity_kind)
        id_attribute = self._get_attribute(model, self.ID_FIELD)
        stmt = select(id_attribute).where(*[self._to_clause(model, condition) for condition in conditions])

        with self.session_factory() as session:
            ids = set(session.scalars(stmt).all())
        logger.debug(f'{entity_kind} filter matched {len(ids)} records')
        return ids

    def load_many(self, entity_kind: str, ids: Iterable[EntityIdType]) -> dict[EntityIdType, Any]:
        ids = list(ids)
        if not ids:
            return {}

        model = self._get_model(entity_kind)
        id_attribute = self._get_attribute(model, self.ID_FIELD)
        stmt = select(model).where(id_attribute.in_(ids))

        with self.session_factory() as session:
            instances = session.scalars(stmt).all()
            return {getattr(instance, self.ID_FIELD): self._to_record(session, instance) for instance in instances}

    @staticmethod
    def _to_record(session: Session, instance: Any) -> Any:
        if hasattr(instance, 'to_domain'):
            return instance.to_domain()

        read_domain = getattr(instance, '__read_domain__', None)
        if read_domain is not None:
            return read_domain.model_validate(instance)

        session.expunge(instance)
        return instance
