from datetime import date, datetime
from typing import List, Optional

from pydantic import EmailStr, Field, HttpUrl

from app.core.schemas import CamelModel
from app.models.user import Proficiency, UserRole
from app.schemas.common import CompanyBrief, SkillBrief


class UserRegister(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: UserRole = UserRole.JOB_SEEKER
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class ProfileUpdate(CamelModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    date_of_birth: Optional[date] = None
    bio: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=200)
    website: Optional[HttpUrl] = None


class FileUrlUpdate(CamelModel):
    url: str = Field(..., min_length=1, max_length=500)


class UserSkillCreate(CamelModel):
    skill_id: int
    proficiency: Optional[Proficiency] = None
    years_of_exp: Optional[int] = None


class UserStatusUpdate(CamelModel):
    is_active: bool


class ProfileOut(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    avatar_url: Optional[str] = None
    resume_url: Optional[str] = None


class UserSkillOut(CamelModel):
    id: int
    skill_id: int
    proficiency: Optional[Proficiency] = None
    years_of_exp: Optional[int] = None
    skill: SkillBrief


class UserOut(CamelModel):
    id: int
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime
    profile: Optional[ProfileOut] = None


class UserDetailOut(UserOut):
    company: Optional[CompanyBrief] = None
    user_skills: List[UserSkillOut] = Field(default_factory=list)


class AdminUserOut(UserOut):
    deactivated_at: Optional[datetime] = None
    updated_at: datetime
