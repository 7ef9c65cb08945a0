"""
Pagination primitives shared by every list endpoint.

``PageParams`` clamps raw query values into a safe page window and
``Page`` wraps one page of results with the counters clients need to
render navigation.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from app.core.config import settings
from app.core.schemas import PaginationMeta


def _coerce_int(value: Union[str, int, None]) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    limit: int = settings.default_page_size

    @classmethod
    def from_query(
        cls,
        page: Union[str, int, None] = None,
        limit: Union[str, int, None] = None,
    ) -> "PageParams":
        """
        Build a page window from untrusted query values.

        - page: default 1, anything below 1 becomes 1
        - limit: default 10, anything below 1 or unparsable becomes the default,
          anything above the maximum is capped at 50
        """
        parsed_page = _coerce_int(page)
        parsed_limit = _coerce_int(limit)

        if parsed_page is None or parsed_page < 1:
            parsed_page = 1
        if parsed_limit is None or parsed_limit < 1:
            parsed_limit = settings.default_page_size
        parsed_limit = min(parsed_limit, settings.max_page_size)

        return cls(page=parsed_page, limit=parsed_limit)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page:
    items: List[Any]
    total: int
    page: int
    limit: int
    total_pages: int = field(init=False)
    has_next: bool = field(init=False)
    has_prev: bool = field(init=False)

    def __post_init__(self):
        self.total_pages = math.ceil(self.total / self.limit) if self.limit else 0
        self.has_next = self.page < self.total_pages
        self.has_prev = self.page > 1

    @classmethod
    def build(cls, items: List[Any], total: int, params: PageParams) -> "Page":
        return cls(items=list(items), total=total, page=params.page, limit=params.limit)

    def map(self, fn: Callable[[Any], Any]) -> "Page":
        """Return the same page window with every item transformed."""
        return Page(items=[fn(item) for item in self.items], total=self.total, page=self.page, limit=self.limit)

    def meta(self) -> PaginationMeta:
        return PaginationMeta(
            total=self.total,
            page=self.page,
            limit=self.limit,
            total_pages=self.total_pages,
            has_next=self.has_next,
            has_prev=self.has_prev,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"items": self.items, **self.meta().model_dump(by_alias=True)}
