"""Small nested shapes shared by several response schemas."""
from typing import Optional

from app.core.schemas import CamelModel


class SkillBrief(CamelModel):
    id: int
    name: str
    category: Optional[str] = None


class CategoryBrief(CamelModel):
    id: int
    name: str
    slug: str


class CompanyBrief(CamelModel):
    id: int
    name: str
    logo_url: Optional[str] = None
    location: Optional[str] = None