from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey, Index, func
from sqlalchemy.orm import relationship
import enum
from app.core.clock import utcnow
from app.database import Base


class CompanySize(str, enum.Enum):
    SIZE_1_10 = "1-10"
    SIZE_11_50 = "11-50"
    SIZE_51_200 = "51-200"
    SIZE_201_500 = "201-500"
    SIZE_501_1000 = "501-1000"
    SIZE_1000_PLUS = "1000+"


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    website = Column(String(500), nullable=True)
    industry = Column(String, nullable=True, index=True)
    size = Column(Enum(CompanySize, values_callable=lambda e: [m.value for m in e]), nullable=True)
    location = Column(String, nullable=True)
    founded = Column(DateTime, nullable=True)
    logo_url = Column(String(500), nullable=True)

    # One company per employer
    owner_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    owner = relationship("User", back_populates="company")
    jobs = relationship("Job", back_populates="company", cascade="all, delete-orphan")


# Names are unique regardless of case
Index("uq_companies_name_lower", func.lower(Company.name), unique=True)
