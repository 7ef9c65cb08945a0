from typing import List, Optional

from sqlalchemy import func

from app.models.category import Category
from app.models.job import Job
from app.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    model = Category

    def get_by_name(self, name: str) -> Optional[Category]:
        return self.query().filter(func.lower(Category.name) == name.strip().lower()).first()

    def get_by_slug(self, slug: str) -> Optional[Category]:
        return self.query().filter(func.lower(Category.slug) == slug.strip().lower()).first()

    def all_by_name(self) -> List[Category]:
        return self.query().order_by(Category.name.asc()).all()

    def job_count(self, category_id: int) -> int:
        return self.db.query(Job).filter(Job.category_id == category_id).count()
