from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from app.core.pagination import Page, PageParams
from app.core.security import Actor
from app.database import transaction
from app.models.category import Category
from app.models.user import UserRole
from app.repositories import CategoryRepository, JobRepository
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.services.base import BaseService
from app.services.guards import require_role
from app.services.job_filters import JobFilterParams, compile_job_filters

DUPLICATE = "Category with this name or slug already exists"


class CategoryService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.categories = CategoryRepository(db)
        self.jobs = JobRepository(db)

    def get_all_categories(self) -> List[Category]:
        """Alphabetical, each carrying its published job count."""
        return self.categories.all_by_name()

    def get_category_by_id(self, category_id: int) -> Category:
        category = self.categories.get(category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category

    def get_category_jobs(
        self,
        category_id: int,
        params: PageParams,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Page:
        category = self.get_category_by_id(category_id)
        compiled = compile_job_filters(
            JobFilterParams(category=category.id, sort_by=sort_by, sort_order=sort_order),
            now,
        )
        return self.jobs.find_page(compiled.predicate, compiled.ordering, params)

    def _ensure_unique(self, name: Optional[str], slug: Optional[str], category_id: Optional[int] = None) -> None:
        for existing in (
            self.categories.get_by_name(name) if name else None,
            self.categories.get_by_slug(slug) if slug else None,
        ):
            if existing is not None and existing.id != category_id:
                raise ConflictError(DUPLICATE)

    def create_category(self, actor: Actor, data: CategoryCreate) -> Category:
        require_role(actor, UserRole.ADMIN)
        name, slug = data.name.strip(), data.slug.strip().lower()
        self._ensure_unique(name, slug)

        with self.conflict_on_duplicate(DUPLICATE), transaction(self.db):
            category = Category(name=name, slug=slug, description=(data.description or "").strip() or None)
            self.categories.add(category)

        self.db.refresh(category)
        self._logger.info(f"Category {category.id} '{category.slug}' created")
        return category

    def update_category(self, category_id: int, actor: Actor, data: CategoryUpdate) -> Category:
        require_role(actor, UserRole.ADMIN)
        category = self.get_category_by_id(category_id)

        changes: Dict[str, Any] = data.model_dump(exclude_unset=True)
        if changes.get("name") is not None:
            changes["name"] = changes["name"].strip()
        else:
            changes.pop("name", None)
        if changes.get("slug") is not None:
            changes["slug"] = changes["slug"].strip().lower()
        else:
            changes.pop("slug", None)
        if "description" in changes:
            changes["description"] = (changes["description"] or "").strip() or None
        self._ensure_unique(changes.get("name"), changes.get("slug"), category.id)

        with self.conflict_on_duplicate(DUPLICATE), transaction(self.db):
            for field, value in changes.items():
                setattr(category, field, value)
            self.db.flush()

        self.db.refresh(category)
        return category

    def delete_category(self, category_id: int, actor: Actor) -> None:
        require_role(actor, UserRole.ADMIN)
        category = self.get_category_by_id(category_id)
        if self.categories.job_count(category.id) > 0:
            raise InvalidInputError("Cannot delete category with existing jobs")

        with transaction(self.db):
            self.categories.delete(category)
        self._logger.info(f"Category {category_id} deleted")
