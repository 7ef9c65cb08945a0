from .base import BaseRepository, apply_ordering, to_clause
from .application_repository import ApplicationRepository
from .category_repository import CategoryRepository
from .company_repository import CompanyRepository
from .job_repository import JobRepository
from .skill_repository import SkillRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "apply_ordering",
    "to_clause",
    "ApplicationRepository",
    "CategoryRepository",
    "CompanyRepository",
    "JobRepository",
    "SkillRepository",
    "UserRepository",
]
