from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, Enum, ForeignKey, UniqueConstraint, func, select
from sqlalchemy.orm import column_property, relationship
import enum
from app.core.clock import utcnow
from app.database import Base
from app.models.category import Category
from app.models.company import Company


class JobType(str, enum.Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERNSHIP = "INTERNSHIP"
    FREELANCE = "FREELANCE"


class ExperienceLevel(str, enum.Enum):
    ENTRY = "ENTRY"
    JUNIOR = "JUNIOR"
    MID = "MID"
    SENIOR = "SENIOR"
    LEAD = "LEAD"
    EXECUTIVE = "EXECUTIVE"


class JobStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CLOSED = "CLOSED"
    EXPIRED = "EXPIRED"


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, index=True, nullable=False)
    description = Column(Text, nullable=False)
    requirements = Column(Text, nullable=True)
    responsibilities = Column(Text, nullable=True)

    type = Column(Enum(JobType), nullable=False, index=True)
    experience_level = Column(Enum(ExperienceLevel), nullable=False, index=True)

    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    currency = Column(String(3), default="USD", nullable=False)

    location = Column(String, nullable=True)
    is_remote = Column(Boolean, default=False, nullable=False)
    application_email = Column(String, nullable=True)
    application_url = Column(String(500), nullable=True)

    status = Column(Enum(JobStatus), default=JobStatus.DRAFT, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=True, index=True)

    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    posted_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    company = relationship("Company", back_populates="jobs")
    category = relationship("Category", back_populates="jobs")
    posted_by = relationship("User", back_populates="posted_jobs")
    job_skills = relationship("JobSkill", back_populates="job", cascade="all, delete-orphan")
    applications = relationship("Application", back_populates="job", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Job {self.id} {self.title!r} ({self.status.value})>"

    def is_expired(self, now) -> bool:
        return self.expires_at is not None and self.expires_at <= now


class JobSkill(Base):
    __tablename__ = "job_skills"
    __table_args__ = (
        UniqueConstraint("job_id", "skill_id", name="uq_job_skill"),
    )

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False, index=True)
    is_required = Column(Boolean, default=True, nullable=False)

    job = relationship("Job", back_populates="job_skills")
    skill = relationship("Skill", back_populates="job_skills")


# Open positions, i.e. published jobs
Company.job_count = column_property(
    select(func.count(Job.id))
    .where(Job.company_id == Company.id, Job.status == JobStatus.PUBLISHED)
    .correlate_except(Job)
    .scalar_subquery()
)
Category.job_count = column_property(
    select(func.count(Job.id))
    .where(Job.category_id == Category.id, Job.status == JobStatus.PUBLISHED)
    .correlate_except(Job)
    .scalar_subquery()
)
