from datetime import datetime
from typing import Dict, List, Optional

from pydantic import EmailStr, Field, HttpUrl

from app.core.schemas import CamelModel
from app.models.job import ExperienceLevel, JobStatus, JobType
from app.schemas.common import CategoryBrief, CompanyBrief, SkillBrief


class JobBase(CamelModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=10)
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    type: JobType
    experience_level: ExperienceLevel
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    location: Optional[str] = Field(None, max_length=200)
    is_remote: bool = False
    application_email: Optional[EmailStr] = None
    application_url: Optional[HttpUrl] = None
    category_id: Optional[int] = None
    expires_at: Optional[datetime] = None


class JobCreate(JobBase):
    skills: List[int] = Field(default_factory=list)


class JobUpdate(CamelModel):
    """Partial update: only keys present in the body are applied."""
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=10)
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    location: Optional[str] = Field(None, max_length=200)
    is_remote: Optional[bool] = None
    application_email: Optional[EmailStr] = None
    application_url: Optional[HttpUrl] = None
    category_id: Optional[int] = None
    expires_at: Optional[datetime] = None
    status: Optional[JobStatus] = None
    skills: Optional[List[int]] = None


class JobSkillOut(CamelModel):
    skill_id: int
    is_required: bool
    skill: SkillBrief


class JobOut(CamelModel):
    id: int
    title: str
    description: str
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    type: JobType
    experience_level: ExperienceLevel
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    currency: str
    location: Optional[str] = None
    is_remote: bool
    application_email: Optional[str] = None
    application_url: Optional[str] = None
    status: JobStatus
    expires_at: Optional[datetime] = None
    company_id: int
    category_id: Optional[int] = None
    posted_by_id: int
    created_at: datetime
    updated_at: datetime
    company: CompanyBrief
    category: Optional[CategoryBrief] = None
    job_skills: List[JobSkillOut] = Field(default_factory=list)
    application_count: int = 0


class JobBrief(CamelModel):
    id: int
    title: str
    status: JobStatus
    created_at: datetime


class JobStatsOut(CamelModel):
    job: JobBrief
    total_applications: int
    applications_by_status: Dict[str, int]
    applications_over_time: List[Dict[str, object]]
