from typing import Dict, List, Optional

from sqlalchemy import func

from app.models.company import Company
from app.models.job import Job, JobStatus
from app.repositories.base import BaseRepository


class CompanyRepository(BaseRepository[Company]):
    model = Company

    def get_by_owner(self, owner_id: int) -> Optional[Company]:
        return self.query().filter(Company.owner_id == owner_id).first()

    def get_by_name(self, name: str) -> Optional[Company]:
        """Case-insensitive exact name lookup."""
        return self.query().filter(func.lower(Company.name) == name.strip().lower()).first()

    def has_published_jobs(self, company_id: int) -> bool:
        return self.db.query(
            self.db.query(Job)
            .filter(Job.company_id == company_id, Job.status == JobStatus.PUBLISHED)
            .exists()
        ).scalar()

    def job_counts_by_status(self, company_id: int) -> Dict[str, int]:
        rows = (
            self.db.query(Job.status, func.count(Job.id))
            .filter(Job.company_id == company_id)
            .group_by(Job.status)
            .all()
        )
        return {status.value: count for status, count in rows}

    def industries(self) -> List[Dict[str, object]]:
        rows = (
            self.db.query(Company.industry, func.count(Company.id).label("companies"))
            .filter(Company.industry.isnot(None))
            .group_by(Company.industry)
            .order_by(func.count(Company.id).desc(), Company.industry.asc())
            .all()
        )
        return [{"industry": industry, "count": count} for industry, count in rows]
