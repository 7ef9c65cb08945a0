"""
Predicate tree used to describe collection filters independently of SQL.

Fields are attribute paths on the queried model. A dotted path such as
``company.name`` or ``job_skills.skill_id`` walks a relationship; the
repository layer decides how to express that in SQL.
"""
import enum
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple, Union


@dataclass(frozen=True)
class Equals:
    """``field == value``; a ``None`` value means IS NULL."""
    field: str
    value: Any


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match."""
    field: str
    value: str


@dataclass(frozen=True)
class Range:
    field: str
    gt: Any = None
    gte: Any = None
    lt: Any = None
    lte: Any = None

    def __post_init__(self):
        if all(bound is None for bound in (self.gt, self.gte, self.lt, self.lte)):
            raise ValueError(f"Range on '{self.field}' needs at least one bound")


@dataclass(frozen=True)
class OneOf:
    field: str
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class And:
    clauses: Tuple["Predicate", ...]


@dataclass(frozen=True)
class Or:
    clauses: Tuple["Predicate", ...]


Predicate = Union[Equals, Contains, Range, OneOf, And, Or]


def all_of(*clauses: Predicate) -> And:
    return And(tuple(clauses))


def any_of(*clauses: Predicate) -> Or:
    return Or(tuple(clauses))


def walk(predicate: Predicate) -> Iterator[Predicate]:
    """Yield every node of the tree, depth first."""
    yield predicate
    if isinstance(predicate, (And, Or)):
        for clause in predicate.clauses:
            yield from walk(clause)


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Ordering:
    field: str
    direction: SortOrder = SortOrder.DESC

    @property
    def descending(self) -> bool:
        return self.direction == SortOrder.DESC


def fields_of(predicate: Optional[Predicate]) -> set:
    """Every field path referenced by the tree."""
    if predicate is None:
        return set()
    return {node.field for node in walk(predicate) if not isinstance(node, (And, Or))}
