from sqlalchemy import Column, Integer, String, Text, DateTime, Index, func
from sqlalchemy.orm import relationship
from app.core.clock import utcnow
from app.database import Base

class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    jobs = relationship("Job", back_populates="category")


Index("uq_categories_name_lower", func.lower(Category.name), unique=True)
Index("uq_categories_slug_lower", func.lower(Category.slug), unique=True)
