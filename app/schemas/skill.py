from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.core.schemas import CamelModel


class SkillCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=100)


class SkillUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=100)


class SkillBulkCreate(CamelModel):
    skills: List[SkillCreate] = Field(..., min_length=1, max_length=100)


class SkillOut(CamelModel):
    id: int
    name: str
    category: Optional[str] = None
    created_at: datetime


class PopularSkillOut(SkillOut):
    job_count: int = 0
    user_count: int = 0
