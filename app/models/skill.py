from sqlalchemy import Column, Integer, String, DateTime, Index, func
from sqlalchemy.orm import relationship
from app.core.clock import utcnow
from app.database import Base

class Skill(Base):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=True, index=True)  # free-form label, e.g. "Programming"
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    job_skills = relationship("JobSkill", back_populates="skill")
    user_skills = relationship("UserSkill", back_populates="skill")


Index("uq_skills_name_lower", func.lower(Skill.name), unique=True)
