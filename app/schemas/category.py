from datetime import datetime
from typing import Optional

from pydantic import Field

from app.core.schemas import CamelModel

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    slug: str = Field(..., min_length=2, max_length=100, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=1000)


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    slug: Optional[str] = Field(None, min_length=2, max_length=100, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=1000)


class CategoryOut(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    created_at: datetime
    job_count: int = 0
