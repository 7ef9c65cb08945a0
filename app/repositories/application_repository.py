from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func

from app.core.predicates import Predicate
from app.models.application import Application
from app.repositories.base import BaseRepository


class ApplicationRepository(BaseRepository[Application]):
    model = Application

    def find_for(self, job_id: int, applicant_id: int) -> Optional[Application]:
        return (
            self.query()
            .filter(Application.job_id == job_id, Application.applicant_id == applicant_id)
            .first()
        )

    def counts_by_status(self, predicate: Optional[Predicate] = None) -> Dict[str, int]:
        rows = (
            self.db.query(Application.status, func.count(Application.id))
            .filter(self.where(predicate))
            .group_by(Application.status)
            .all()
        )
        return {status.value: count for status, count in rows}

    def daily_counts(self, job_id: int, since: datetime) -> List[Dict[str, object]]:
        day = func.date(Application.applied_at).label("day")
        rows = (
            self.db.query(day, func.count(Application.id))
            .filter(Application.job_id == job_id, Application.applied_at >= since)
            .group_by(day)
            .order_by(day.asc())
            .all()
        )
        # SQLite hands back strings, PostgreSQL date objects
        return [{"date": str(d), "count": count} for d, count in rows]
