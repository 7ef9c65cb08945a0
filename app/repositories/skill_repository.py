from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func

from app.models.job import JobSkill
from app.models.skill import Skill
from app.models.user import UserSkill
from app.repositories.base import BaseRepository


class SkillRepository(BaseRepository[Skill]):
    model = Skill

    def get_by_name(self, name: str) -> Optional[Skill]:
        return self.query().filter(func.lower(Skill.name) == name.strip().lower()).first()

    def get_many(self, skill_ids: Iterable[int]) -> List[Skill]:
        ids = list(skill_ids)
        if not ids:
            return []
        return self.query().filter(Skill.id.in_(ids)).all()

    def existing_names(self, names: Iterable[str]) -> List[str]:
        lowered = [name.strip().lower() for name in names]
        if not lowered:
            return []
        rows = self.db.query(Skill.name).filter(func.lower(Skill.name).in_(lowered)).all()
        return [row.name for row in rows]

    def usage(self, skill_id: int) -> Tuple[int, int]:
        """(job references, user references)"""
        jobs = self.db.query(JobSkill).filter(JobSkill.skill_id == skill_id).count()
        users = self.db.query(UserSkill).filter(UserSkill.skill_id == skill_id).count()
        return jobs, users

    def categories(self) -> List[str]:
        rows = (
            self.db.query(Skill.category)
            .filter(Skill.category.isnot(None))
            .distinct()
            .order_by(Skill.category.asc())
            .all()
        )
        return [row.category for row in rows]

    def popular(self, limit: int) -> List[Tuple[Skill, int, int]]:
        """Skills ranked by how many jobs ask for them, then by how many users list them."""
        job_uses = (
            self.db.query(JobSkill.skill_id, func.count(JobSkill.id).label("jobs"))
            .group_by(JobSkill.skill_id)
            .subquery()
        )
        user_uses = (
            self.db.query(UserSkill.skill_id, func.count(UserSkill.id).label("users"))
            .group_by(UserSkill.skill_id)
            .subquery()
        )
        jobs = func.coalesce(job_uses.c.jobs, 0)
        users = func.coalesce(user_uses.c.users, 0)
        rows = (
            self.db.query(Skill, jobs, users)
            .outerjoin(job_uses, job_uses.c.skill_id == Skill.id)
            .outerjoin(user_uses, user_uses.c.skill_id == Skill.id)
            .order_by(jobs.desc(), users.desc(), Skill.name.asc())
            .limit(limit)
            .all()
        )
        return [(skill, job_count, user_count) for skill, job_count, user_count in rows]

    def by_category(self, label: str) -> List[Skill]:
        return (
            self.query()
            .filter(func.lower(Skill.category) == label.strip().lower())
            .order_by(Skill.name.asc())
            .all()
        )
