"""Cron entry point: moves published jobs past their expiry date to EXPIRED."""
import logging

from app.core.config import settings
from app.core.logging import setup_logging
from app.database import Database
from app.services.job_service import JobService

logger = logging.getLogger(__name__)


def expire_jobs() -> int:
    database = Database(settings.database_url, settings.database_echo)
    database.connect()
    try:
        with database.session_scope() as db:
            return JobService(db).expire_old_jobs()
    finally:
        database.dispose()


if __name__ == "__main__":
    setup_logging()
    count = expire_jobs()
    print(f"Expired {count} jobs")
