# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, company, category, skill, job, application

# Explicit class exports for cleaner imports
from .user import User, UserRole, Profile, UserSkill, Proficiency
from .company import Company, CompanySize
from .category import Category
from .skill import Skill
from .job import Job, JobSkill, JobType, JobStatus, ExperienceLevel
from .application import Application, ApplicationStatus

__all__ = [
    "User",
    "UserRole",
    "Profile",
    "UserSkill",
    "Proficiency",
    "Company",
    "CompanySize",
    "Category",
    "Skill",
    "Job",
    "JobSkill",
    "JobType",
    "JobStatus",
    "ExperienceLevel",
    "Application",
    "ApplicationStatus",
]
