from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from app.core.pagination import Page, PageParams
from app.core.predicates import Contains, Equals, Ordering, Predicate, SortOrder, all_of
from app.core.security import Actor
from app.database import transaction
from app.models.skill import Skill
from app.models.user import UserRole
from app.repositories import SkillRepository
from app.schemas.skill import SkillBulkCreate, SkillCreate, SkillUpdate
from app.services.base import BaseService
from app.services.guards import require_role

DUPLICATE = "Skill with this name already exists"
MIN_SEARCH_LENGTH = 2
MAX_SEARCH_RESULTS = 20
BY_NAME = Ordering("name", SortOrder.ASC)


def _label(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class SkillService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.skills = SkillRepository(db)

    def get_all_skills(
        self,
        params: PageParams,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Page:
        clauses: List[Predicate] = []
        if _label(category):
            clauses.append(Equals("category", _label(category)))
        if _label(search):
            clauses.append(Contains("name", _label(search)))
        return self.skills.find_page(all_of(*clauses), BY_NAME, params)

    def get_skill_by_id(self, skill_id: int) -> Skill:
        skill = self.skills.get(skill_id)
        if skill is None:
            raise NotFoundError("Skill not found")
        return skill

    def search_skills(self, query: Optional[str]) -> List[Skill]:
        """Autocomplete: short queries return nothing rather than everything."""
        term = (query or "").strip()
        if len(term) < MIN_SEARCH_LENGTH:
            return []
        return self.skills.find(Contains("name", term), BY_NAME, limit=MAX_SEARCH_RESULTS)

    def create_skill(self, actor: Actor, data: SkillCreate) -> Skill:
        require_role(actor, UserRole.ADMIN)
        name = data.name.strip()
        if not name:
            raise InvalidInputError("Skill name is required")
        if self.skills.get_by_name(name) is not None:
            raise ConflictError(DUPLICATE)

        with self.conflict_on_duplicate(DUPLICATE), transaction(self.db):
            skill = self.skills.add(Skill(name=name, category=_label(data.category)))

        self.db.refresh(skill)
        self._logger.info(f"Skill {skill.id} '{skill.name}' created")
        return skill

    def update_skill(self, skill_id: int, actor: Actor, data: SkillUpdate) -> Skill:
        require_role(actor, UserRole.ADMIN)
        skill = self.get_skill_by_id(skill_id)

        changes: Dict[str, Any] = data.model_dump(exclude_unset=True)
        if "name" in changes:
            name = _label(changes.pop("name"))
            if name is not None:
                existing = self.skills.get_by_name(name)
                if existing is not None and existing.id != skill.id:
                    raise ConflictError(DUPLICATE)
                changes["name"] = name
        if "category" in changes:
            changes["category"] = _label(changes["category"])

        with self.conflict_on_duplicate(DUPLICATE), transaction(self.db):
            for field, value in changes.items():
                setattr(skill, field, value)
            self.db.flush()

        self.db.refresh(skill)
        return skill

    def delete_skill(self, skill_id: int, actor: Actor) -> None:
        require_role(actor, UserRole.ADMIN)
        skill = self.get_skill_by_id(skill_id)
        job_uses, user_uses = self.skills.usage(skill.id)
        if job_uses or user_uses:
            raise InvalidInputError(
                "Cannot delete skill that is being used by jobs or users",
                details={"jobs": job_uses, "users": user_uses},
            )

        with transaction(self.db):
            self.skills.delete(skill)
        self._logger.info(f"Skill {skill_id} deleted")

    def get_skills_by_category(self, category: str) -> List[Skill]:
        label = _label(category)
        if label is None:
            raise InvalidInputError("Category is required")
        return self.skills.by_category(label)

    def get_popular_skills(self, limit: int = 10) -> List[Tuple[Skill, int, int]]:
        return self.skills.popular(limit)

    def get_skill_categories(self) -> List[str]:
        return self.skills.categories()

    def bulk_create_skills(self, actor: Actor, data: SkillBulkCreate) -> List[Skill]:
        """All-or-nothing: one bad name rejects the whole batch."""
        require_role(actor, UserRole.ADMIN)
        names = [item.name.strip() for item in data.skills]
        if any(not name for name in names):
            raise InvalidInputError("Skill name is required")
        if len({name.lower() for name in names}) != len(names):
            raise InvalidInputError("Duplicate skill names in the request")
        existing = self.skills.existing_names(names)
        if existing:
            raise ConflictError(f"Skills already exist: {', '.join(sorted(existing))}")

        with self.conflict_on_duplicate(DUPLICATE), transaction(self.db):
            created = [
                self.skills.add(Skill(name=name, category=_label(item.category)))
                for name, item in zip(names, data.skills)
            ]

        for skill in created:
            self.db.refresh(skill)
        self._logger.info(f"Bulk created {len(created)} skills")
        return created
