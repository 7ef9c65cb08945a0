"""
Repository base: typed query construction over one mapped model.

Predicate trees from ``app.core.predicates`` are translated here into
SQLAlchemy expressions. Dotted field paths walk relationships:
collections become ``EXISTS`` via ``any()``, scalar references via
``has()``.
"""
import logging
from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import and_, false, inspect, or_, true
from sqlalchemy.orm import Query, Session
from sqlalchemy.sql.elements import ColumnElement

from app.core.pagination import Page, PageParams
from app.core.predicates import And, Contains, Equals, OneOf, Or, Ordering, Predicate, Range
from app.database import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def _column_or_relationship(model: Type[Base], name: str):
    mapper = inspect(model)
    if name in mapper.relationships:
        return getattr(model, name), mapper.relationships[name]
    if name in mapper.column_attrs:
        return getattr(model, name), None
    raise ValueError(f"{model.__name__} has no field '{name}'")


def _compare(column, node: Predicate) -> ColumnElement:
    if isinstance(node, Equals):
        return column.is_(None) if node.value is None else column == node.value
    if isinstance(node, Contains):
        return column.icontains(node.value, autoescape=True)
    if isinstance(node, Range):
        bounds = []
        if node.gt is not None:
            bounds.append(column > node.gt)
        if node.gte is not None:
            bounds.append(column >= node.gte)
        if node.lt is not None:
            bounds.append(column < node.lt)
        if node.lte is not None:
            bounds.append(column <= node.lte)
        return and_(*bounds)
    if isinstance(node, OneOf):
        if not node.values:
            return false()
        return column.in_(node.values)
    raise TypeError(f"Unsupported predicate node: {type(node).__name__}")


def _leaf(model: Type[Base], path: Sequence[str], node: Predicate) -> ColumnElement:
    attr, relationship = _column_or_relationship(model, path[0])
    if len(path) == 1:
        if relationship is not None:
            raise ValueError(f"'{path[0]}' is a relationship; name one of its fields")
        return _compare(attr, node)
    if relationship is None:
        raise ValueError(f"'{path[0]}' on {model.__name__} is not a relationship")
    inner = _leaf(relationship.mapper.class_, path[1:], node)
    return attr.any(inner) if relationship.uselist else attr.has(inner)


def to_clause(model: Type[Base], predicate: Optional[Predicate]) -> ColumnElement:
    """Translate a predicate tree into a WHERE expression for ``model``."""
    if predicate is None:
        return true()
    if isinstance(predicate, And):
        if not predicate.clauses:
            return true()
        return and_(*(to_clause(model, clause) for clause in predicate.clauses))
    if isinstance(predicate, Or):
        if not predicate.clauses:
            return false()
        return or_(*(to_clause(model, clause) for clause in predicate.clauses))
    return _leaf(model, predicate.field.split("."), predicate)


def apply_ordering(query: Query, model: Type[Base], ordering: Optional[Ordering]) -> Query:
    """
    Order by a column of ``model`` or of a to-one relationship
    (``company.name``), always breaking ties on the primary key so paging
    is stable.
    """
    if ordering is None:
        return query.order_by(model.id.desc())

    path = ordering.field.split(".")
    target = model
    for hop in path[:-1]:
        attr, relationship = _column_or_relationship(target, hop)
        if relationship is None or relationship.uselist:
            raise ValueError(f"Cannot order {model.__name__} by '{ordering.field}'")
        query = query.join(attr)
        target = relationship.mapper.class_

    column, relationship = _column_or_relationship(target, path[-1])
    if relationship is not None:
        raise ValueError(f"Cannot order {model.__name__} by '{ordering.field}'")

    if ordering.descending:
        return query.order_by(column.desc(), model.id.desc())
    return query.order_by(column.asc(), model.id.asc())


class BaseRepository(Generic[ModelT]):
    model: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def query(self) -> Query:
        return self.db.query(self.model)

    def get(self, entity_id: Any) -> Optional[ModelT]:
        return self.db.get(self.model, entity_id)

    def add(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        self.db.flush()
        return entity

    def delete(self, entity: ModelT) -> None:
        self.db.delete(entity)
        self.db.flush()

    def where(self, predicate: Optional[Predicate]) -> ColumnElement:
        return to_clause(self.model, predicate)

    def find(
        self,
        predicate: Optional[Predicate] = None,
        ordering: Optional[Ordering] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[ModelT]:
        query = apply_ordering(self.query().filter(self.where(predicate)), self.model, ordering)
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count(self, predicate: Optional[Predicate] = None) -> int:
        return self.query().filter(self.where(predicate)).count()

    def exists(self, predicate: Predicate) -> bool:
        return self.db.query(self.query().filter(self.where(predicate)).exists()).scalar()

    def find_page(
        self,
        predicate: Optional[Predicate],
        ordering: Optional[Ordering],
        params: PageParams,
    ) -> Page:
        """One paged fetch and one count over the identical predicate."""
        items = self.find(predicate, ordering, skip=params.skip, limit=params.limit)
        total = self.count(predicate)
        return Page.build(items, total, params)
