from datetime import datetime
from typing import Iterable, List, Tuple

from sqlalchemy import func

from app.core.predicates import Predicate
from app.models.application import Application
from app.models.job import Job, JobSkill, JobStatus
from app.repositories.base import BaseRepository


class JobRepository(BaseRepository[Job]):
    model = Job

    def count_applications(self, job_id: int) -> int:
        return self.db.query(Application).filter(Application.job_id == job_id).count()

    def skill_ids(self, job_id: int) -> List[int]:
        rows = self.db.query(JobSkill.skill_id).filter(JobSkill.job_id == job_id).all()
        return [row.skill_id for row in rows]

    def replace_skills(self, job: Job, skill_ids: Iterable[int], is_required: bool = True) -> None:
        job.job_skills.clear()
        self.db.flush()
        for skill_id in skill_ids:
            job.job_skills.append(JobSkill(skill_id=skill_id, is_required=is_required))
        self.db.flush()

    def expire_published(self, now: datetime) -> int:
        """Bulk PUBLISHED -> EXPIRED for every job whose expiry has passed."""
        return (
            self.db.query(Job)
            .filter(
                Job.status == JobStatus.PUBLISHED,
                Job.expires_at.isnot(None),
                Job.expires_at <= now,
            )
            .update(
                {Job.status: JobStatus.EXPIRED, Job.updated_at: now},
                synchronize_session=False,
            )
        )

    def trending(self, predicate: Predicate, since: datetime, limit: int) -> List[Tuple[Job, int]]:
        """Matching jobs ranked by applications received since ``since``."""
        recent = func.count(Application.id).label("recent_applications")
        query = (
            self.db.query(Job, recent)
            .join(Application, Application.job_id == Job.id)
            .filter(self.where(predicate))
            .filter(Application.applied_at >= since)
            .group_by(Job.id)
            .order_by(recent.desc(), Job.id.desc())
            .limit(limit)
        )
        return [(job, count) for job, count in query.all()]
