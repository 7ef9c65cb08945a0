"""
Job search filter compiler.

Turns the optional filters of a job listing request into a predicate tree
plus a single ordering directive. The function is pure: the same
parameters and the same ``now`` always compile to an equal result, and
``now`` is captured once so the page fetch and the count share one
expiry cutoff.
"""
import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Optional, Tuple, Type

from app.core.clock import to_naive_utc, utcnow
from app.core.exceptions import InvalidInputError
from app.core.predicates import (
    And,
    Contains,
    Equals,
    OneOf,
    Ordering,
    Or,
    Predicate,
    Range,
    SortOrder,
    all_of,
    any_of,
)
from app.models.job import ExperienceLevel, JobStatus, JobType


# Public sort keys mapped to job attribute paths
SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "title": "title",
    "salary": "salary_max",
    "salaryMin": "salary_min",
    "salaryMax": "salary_max",
    "company": "company.name",
    "type": "type",
    "experienceLevel": "experience_level",
    "location": "location",
    "expiresAt": "expires_at",
}
DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_ORDER = SortOrder.DESC

SEARCH_FIELDS = ("title", "description", "requirements", "responsibilities", "company.name")


def active_baseline(now: datetime) -> Tuple[Equals, Or]:
    """Published and not past its expiry as of ``now``."""
    return (
        Equals("status", JobStatus.PUBLISHED),
        any_of(Equals("expires_at", None), Range("expires_at", gt=now)),
    )


@dataclass(frozen=True)
class JobFilterParams:
    search: Optional[str] = None
    category: Optional[int] = None
    type: Optional[Any] = None
    experience_level: Optional[Any] = None
    location: Optional[str] = None
    is_remote: Optional[bool] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    skills: Tuple[int, ...] = ()
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None


@dataclass(frozen=True)
class CompiledJobQuery:
    predicate: And
    ordering: Ordering
    now: datetime


def _enum_value(enum_cls: Type[enum.Enum], value: Any, label: str) -> enum.Enum:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInputError(f"Invalid {label}. Allowed values: {allowed}")


def compile_ordering(sort_by: Optional[str] = None, sort_order: Optional[str] = None) -> Ordering:
    key = (sort_by or "").strip() or DEFAULT_SORT_BY
    if key not in SORT_FIELDS:
        raise InvalidInputError(
            f"Cannot sort by '{key}'",
            details={"allowed": sorted(SORT_FIELDS)},
        )

    direction = (sort_order or "").strip().lower() or DEFAULT_SORT_ORDER.value
    try:
        order = SortOrder(direction)
    except ValueError:
        raise InvalidInputError("Sort order must be 'asc' or 'desc'")

    return Ordering(SORT_FIELDS[key], order)


def _distinct_ids(values: Iterable[int]) -> Tuple[int, ...]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return tuple(seen)


def compile_job_filters(params: JobFilterParams, now: Optional[datetime] = None) -> CompiledJobQuery:
    """
    Build the listing predicate.

    Every clause is AND-ed onto the active baseline. Zero and empty
    values count as absent. The location clause is dropped when remote
    jobs were asked for, so a remote job is never excluded by where its
    office is.
    """
    now = to_naive_utc(now) if now is not None else utcnow()
    clauses: List[Predicate] = list(active_baseline(now))

    term = (params.search or "").strip()
    if term:
        clauses.append(any_of(*(Contains(field, term) for field in SEARCH_FIELDS)))

    if params.category:
        clauses.append(Equals("category_id", params.category))

    if params.type:
        clauses.append(Equals("type", _enum_value(JobType, params.type, "job type")))

    if params.experience_level:
        clauses.append(
            Equals("experience_level", _enum_value(ExperienceLevel, params.experience_level, "experience level"))
        )

    location = (params.location or "").strip()
    if location and params.is_remote is not True:
        clauses.append(Contains("location", location))

    if params.is_remote is not None:
        clauses.append(Equals("is_remote", params.is_remote))

    if params.salary_min:
        clauses.append(
            any_of(
                Range("salary_min", gte=params.salary_min),
                Range("salary_max", gte=params.salary_min),
            )
        )

    if params.salary_max:
        clauses.append(Range("salary_max", lte=params.salary_max))

    skills = _distinct_ids(params.skills or ())
    if skills:
        clauses.append(OneOf("job_skills.skill_id", skills))

    return CompiledJobQuery(
        predicate=all_of(*clauses),
        ordering=compile_ordering(params.sort_by, params.sort_order),
        now=now,
    )
