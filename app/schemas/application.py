from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from app.core.schemas import CamelModel
from app.models.application import ApplicationStatus
from app.models.job import ExperienceLevel, JobStatus, JobType
from app.schemas.common import CompanyBrief
from app.schemas.user import ProfileOut, UserSkillOut


class ApplyRequest(CamelModel):
    cover_letter: Optional[str] = Field(None, max_length=5000)
    resume_url: Optional[str] = Field(None, max_length=500)


class ApplicationStatusUpdate(CamelModel):
    status: ApplicationStatus


class ApplicationJob(CamelModel):
    id: int
    title: str
    type: JobType
    experience_level: ExperienceLevel
    status: JobStatus
    company: CompanyBrief


class ApplicantPublic(CamelModel):
    """What an employer may see about an applicant."""
    id: int
    profile: Optional[ProfileOut] = None
    user_skills: List[UserSkillOut] = Field(default_factory=list)


class ApplicantFull(ApplicantPublic):
    email: str


class ApplicationOut(CamelModel):
    id: int
    job_id: int
    applicant_id: int
    status: ApplicationStatus
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    applied_at: datetime
    updated_at: datetime
    job: ApplicationJob


class ApplicationEmployerView(ApplicationOut):
    applicant: ApplicantPublic


class ApplicationApplicantView(ApplicationOut):
    applicant: ApplicantFull


class ApplicationStatsOut(CamelModel):
    total_applications: int
    recent_applications: int
    applications_by_status: Dict[str, int]
