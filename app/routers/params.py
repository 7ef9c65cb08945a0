"""
Query-string coercion and envelope helpers shared by the routers.
"""
from typing import Any, List, Optional, Type

from fastapi import Query

from app.core.exceptions import InvalidInputError
from app.core.pagination import Page, PageParams
from app.core.schemas import ApiResponse, serialize


def page_params(
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    limit: Optional[str] = Query(None, description="Page size, at most 50"),
) -> PageParams:
    return PageParams.from_query(page, limit)


def parse_id_list(raw: Optional[List[str]], label: str = "skills") -> List[int]:
    """Accepts repeated keys (?skills=1&skills=2) and comma lists (?skills=1,2)."""
    ids: List[int] = []
    for chunk in raw or []:
        for part in chunk.split(","):
            part = part.strip()
            if not part:
                continue
            try:
                ids.append(int(part))
            except ValueError:
                raise InvalidInputError(f"Invalid {label} id: '{part}'")
    return ids


def ok(data: Any = None, message: str = "Success") -> dict:
    return ApiResponse.ok(data, message).to_dict()


def ok_item(schema: Type, obj: Any, message: str = "Success") -> dict:
    return ApiResponse.ok(serialize(schema, obj), message).to_dict()


def ok_page(schema: Type, page: Page, message: str = "Success") -> dict:
    return ApiResponse.paginated(page.map(lambda item: serialize(schema, item)), message).to_dict()
