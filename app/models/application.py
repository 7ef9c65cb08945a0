from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey, UniqueConstraint, func, select
from sqlalchemy.orm import column_property, relationship
import enum
from app.core.clock import utcnow
from app.database import Base
from app.models.job import Job


class ApplicationStatus(str, enum.Enum):
    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    SHORTLISTED = "SHORTLISTED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


# Once reached, an application can no longer change status
FINAL_APPLICATION_STATUSES = frozenset({ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED})


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        # Authoritative guard against double applications
        UniqueConstraint("job_id", "applicant_id", name="uq_application_job_applicant"),
    )

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    applicant_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(Enum(ApplicationStatus), default=ApplicationStatus.PENDING, nullable=False, index=True)
    cover_letter = Column(Text, nullable=True)
    resume_url = Column(String(500), nullable=True)

    applied_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    job = relationship("Job", back_populates="applications")
    applicant = relationship("User", back_populates="applications")

    @property
    def is_final(self) -> bool:
        return self.status in FINAL_APPLICATION_STATUSES


# Exposed on every loaded Job as a correlated count
Job.application_count = column_property(
    select(func.count(Application.id))
    .where(Application.job_id == Job.id)
    .correlate_except(Application)
    .scalar_subquery()
)
