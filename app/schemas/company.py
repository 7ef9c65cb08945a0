from datetime import datetime
from typing import Dict, Optional

from pydantic import Field, HttpUrl

from app.core.schemas import CamelModel
from app.models.company import CompanySize


class CompanyCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    website: Optional[HttpUrl] = None
    industry: Optional[str] = Field(None, max_length=100)
    size: Optional[CompanySize] = None
    location: Optional[str] = Field(None, max_length=200)
    founded: Optional[datetime] = None


class CompanyUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    website: Optional[HttpUrl] = None
    industry: Optional[str] = Field(None, max_length=100)
    size: Optional[CompanySize] = None
    location: Optional[str] = Field(None, max_length=200)
    founded: Optional[datetime] = None


class LogoUpdate(CamelModel):
    logo_url: str = Field(..., min_length=1, max_length=500)


class CompanyOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[CompanySize] = None
    location: Optional[str] = None
    founded: Optional[datetime] = None
    logo_url: Optional[str] = None
    owner_id: int
    created_at: datetime
    updated_at: datetime
    job_count: int = 0


class CompanyTotals(CamelModel):
    id: int
    name: str
    total_jobs: int


class CompanyStatsOut(CamelModel):
    company: CompanyTotals
    jobs_by_status: Dict[str, int]
    total_applications: int
    recent_applications: int
    created_at: datetime


class IndustryCount(CamelModel):
    industry: str
    count: int
