"""
Job Service Layer

Job listing, posting lifecycle and applications to a job.

Architecture:
- Router -> Service (this module) -> Repositories
- Listing endpoints compile their filters with ``job_filters`` and run
  one paged fetch plus one count over the same predicate
- Ownership is checked explicitly at the top of each operation
"""
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.clock import to_naive_utc, utcnow
from app.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from app.core.pagination import Page, PageParams
from app.core.predicates import Contains, Equals, OneOf, Ordering, Predicate, Range, SortOrder, all_of, any_of
from app.core.security import Actor
from app.database import transaction
from app.models.application import Application, ApplicationStatus
from app.models.job import Job, JobSkill, JobStatus
from app.models.user import UserRole
from app.repositories import (
    ApplicationRepository,
    CategoryRepository,
    JobRepository,
    SkillRepository,
    UserRepository,
)
from app.schemas.application import ApplyRequest
from app.schemas.job import JobCreate, JobUpdate
from app.services.base import BaseService
from app.services.guards import require_owner, require_role
from app.services.job_filters import JobFilterParams, active_baseline, compile_job_filters

# Allowed job status changes; re-publishing is possible from any non-published state
JOB_TRANSITIONS = {
    JobStatus.DRAFT: {JobStatus.PUBLISHED, JobStatus.CLOSED},
    JobStatus.PUBLISHED: {JobStatus.CLOSED, JobStatus.EXPIRED},
    JobStatus.CLOSED: {JobStatus.PUBLISHED},
    JobStatus.EXPIRED: {JobStatus.PUBLISHED, JobStatus.CLOSED},
}

# Columns that can never be cleared by an update
REQUIRED_JOB_FIELDS = {"title", "description", "type", "experience_level", "currency", "is_remote"}
TEXT_JOB_FIELDS = {"title", "description", "requirements", "responsibilities", "location", "application_email"}

NEWEST_FIRST = Ordering("created_at", SortOrder.DESC)


def _trimmed(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def _validate_salary_range(salary_min: Optional[float], salary_max: Optional[float]) -> None:
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise InvalidInputError("Minimum salary cannot be greater than maximum salary")


class JobService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.jobs = JobRepository(db)
        self.applications = ApplicationRepository(db)
        self.categories = CategoryRepository(db)
        self.skills = SkillRepository(db)
        self.users = UserRepository(db)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------
    def get_all_jobs(
        self,
        params: PageParams,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Page:
        return self.search_jobs(JobFilterParams(sort_by=sort_by, sort_order=sort_order), params, now=now)

    def search_jobs(self, filters: JobFilterParams, params: PageParams, now: Optional[datetime] = None) -> Page:
        compiled = compile_job_filters(filters, now)
        return self.jobs.find_page(compiled.predicate, compiled.ordering, params)

    def get_job_by_id(self, job_id: int) -> Job:
        job = self.jobs.get(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        return job

    def get_jobs_by_employer(self, actor: Actor, params: PageParams) -> Page:
        """Every job of the actor's company, whatever its status."""
        return self.jobs.find_page(Equals("company.owner_id", actor.id), NEWEST_FIRST, params)

    def get_similar_jobs(self, job_id: int, limit: int = 5, now: Optional[datetime] = None) -> List[Job]:
        job = self.get_job_by_id(job_id)
        now = to_naive_utc(now) or utcnow()

        related: List[Predicate] = []
        if job.category_id is not None:
            related.append(Equals("category_id", job.category_id))
        skill_ids = self.jobs.skill_ids(job.id)
        if skill_ids:
            related.append(OneOf("job_skills.skill_id", tuple(skill_ids)))
        if not related:
            return []

        predicate = all_of(
            *active_baseline(now),
            # id != job.id
            any_of(Range("id", lt=job.id), Range("id", gt=job.id)),
            any_of(*related),
        )
        return self.jobs.find(predicate, NEWEST_FIRST, limit=limit)

    def get_trending_jobs(self, limit: int = 10, now: Optional[datetime] = None) -> List[Tuple[Job, int]]:
        """Active jobs with the most applications over the last seven days."""
        now = to_naive_utc(now) or utcnow()
        since = now - timedelta(days=7)
        return self.jobs.trending(all_of(*active_baseline(now)), since, limit)

    def get_jobs_by_location(self, location: str, params: PageParams, now: Optional[datetime] = None) -> Page:
        term = (location or "").strip()
        if not term:
            raise InvalidInputError("Location is required")
        now = to_naive_utc(now) or utcnow()
        predicate = all_of(
            *active_baseline(now),
            any_of(Contains("location", term), Equals("is_remote", True)),
        )
        return self.jobs.find_page(predicate, NEWEST_FIRST, params)

    # ------------------------------------------------------------------
    # Posting lifecycle
    # ------------------------------------------------------------------
    def _get_owned_job(self, job_id: int, actor: Actor, message: str) -> Job:
        job = self.get_job_by_id(job_id)
        require_owner(job.company, actor, message)
        return job

    def _validate_category(self, category_id: Optional[int]) -> None:
        if category_id is not None and self.categories.get(category_id) is None:
            raise NotFoundError("Category not found")

    def _validate_skills(self, skill_ids: Iterable[int]) -> List[int]:
        unique_ids = list(dict.fromkeys(skill_ids))
        if len(self.skills.get_many(unique_ids)) != len(unique_ids):
            raise NotFoundError("One or more skills not found")
        return unique_ids

    @staticmethod
    def _validate_expiry(expires_at: Optional[datetime], now: datetime) -> Optional[datetime]:
        expires_at = to_naive_utc(expires_at)
        if expires_at is not None and expires_at <= now:
            raise InvalidInputError("Expiration date must be in the future")
        return expires_at

    def create_job(self, actor: Actor, data: JobCreate) -> Job:
        require_role(actor, UserRole.EMPLOYER, message="Only employers can create jobs")
        user = self.users.get(actor.id)
        if user is None or user.company is None:
            raise InvalidInputError("User must have a company to create jobs")

        _validate_salary_range(data.salary_min, data.salary_max)
        self._validate_category(data.category_id)
        expires_at = self._validate_expiry(data.expires_at, utcnow())
        skill_ids = self._validate_skills(data.skills)

        with transaction(self.db):
            job = Job(
                title=data.title.strip(),
                description=data.description.strip(),
                requirements=_trimmed(data.requirements),
                responsibilities=_trimmed(data.responsibilities),
                type=data.type,
                experience_level=data.experience_level,
                salary_min=data.salary_min,
                salary_max=data.salary_max,
                currency=data.currency.upper(),
                location=_trimmed(data.location),
                is_remote=data.is_remote,
                application_email=_trimmed(data.application_email),
                application_url=str(data.application_url) if data.application_url else None,
                status=JobStatus.DRAFT,
                expires_at=expires_at,
                company_id=user.company.id,
                posted_by_id=user.id,
                category_id=data.category_id,
            )
            job.job_skills = [JobSkill(skill_id=skill_id, is_required=True) for skill_id in skill_ids]
            self.jobs.add(job)

        self.db.refresh(job)
        self._logger.info(f"Job {job.id} created as DRAFT by user {actor.id}")
        return job

    def update_job(self, job_id: int, actor: Actor, data: JobUpdate) -> Job:
        job = self._get_owned_job(job_id, actor, "You can only update your own jobs")

        changes: Dict[str, Any] = data.model_dump(exclude_unset=True)
        skills = changes.pop("skills", None)
        new_status = changes.pop("status", None)

        for field in REQUIRED_JOB_FIELDS:
            if field in changes and changes[field] is None:
                changes.pop(field)
        for field in TEXT_JOB_FIELDS & changes.keys():
            changes[field] = _trimmed(changes[field])
        if changes.get("application_url") is not None:
            changes["application_url"] = str(changes["application_url"])
        if changes.get("currency"):
            changes["currency"] = changes["currency"].upper()

        _validate_salary_range(
            changes.get("salary_min", job.salary_min),
            changes.get("salary_max", job.salary_max),
        )
        if "category_id" in changes:
            self._validate_category(changes["category_id"])
        now = utcnow()
        if "expires_at" in changes:
            changes["expires_at"] = self._validate_expiry(changes["expires_at"], now)
        if new_status is not None and new_status != job.status:
            if new_status not in JOB_TRANSITIONS[job.status]:
                raise InvalidInputError(
                    f"Cannot change job status from {job.status.value} to {new_status.value}"
                )
            expires_at = changes.get("expires_at", job.expires_at)
            if new_status == JobStatus.PUBLISHED and expires_at is not None and expires_at <= now:
                raise InvalidInputError("Cannot publish a job whose expiration date has passed")
            changes["status"] = new_status
        skill_ids = self._validate_skills(skills) if skills is not None else None

        with transaction(self.db):
            for field, value in changes.items():
                setattr(job, field, value)
            if skill_ids is not None:
                self.jobs.replace_skills(job, skill_ids)
            self.db.flush()

        self.db.refresh(job)
        self._logger.info(f"Job {job.id} updated by user {actor.id}: {sorted(changes)}")
        return job

    def delete_job(self, job_id: int, actor: Actor) -> None:
        job = self._get_owned_job(job_id, actor, "You can only delete your own jobs")
        if self.jobs.count_applications(job.id) > 0:
            raise InvalidInputError("Cannot delete job with existing applications. Close the job instead.")

        with transaction(self.db):
            self.jobs.delete(job)
        self._logger.info(f"Job {job_id} deleted by user {actor.id}")

    def publish_job(self, job_id: int, actor: Actor, now: Optional[datetime] = None) -> Job:
        job = self._get_owned_job(job_id, actor, "You can only publish your own jobs")
        if job.status == JobStatus.PUBLISHED:
            raise InvalidInputError("Job is already published")
        now = to_naive_utc(now) or utcnow()
        if job.is_expired(now):
            raise InvalidInputError("Cannot publish a job whose expiration date has passed")
        return self._set_status(job, JobStatus.PUBLISHED, actor)

    def close_job(self, job_id: int, actor: Actor) -> Job:
        job = self._get_owned_job(job_id, actor, "You can only close your own jobs")
        if job.status == JobStatus.CLOSED:
            raise InvalidInputError("Job is already closed")
        return self._set_status(job, JobStatus.CLOSED, actor)

    def _set_status(self, job: Job, status: JobStatus, actor: Actor) -> Job:
        previous = job.status
        with transaction(self.db):
            job.status = status
            self.db.flush()
        self.db.refresh(job)
        self._logger.info(f"Job {job.id} {previous.value} -> {status.value} by user {actor.id}")
        return job

    def expire_old_jobs(self, now: Optional[datetime] = None) -> int:
        """
        Mark every published job whose expiry has passed as EXPIRED.
        Safe to re-run: a second sweep at the same instant changes nothing.
        """
        now = to_naive_utc(now) or utcnow()
        with transaction(self.db):
            count = self.jobs.expire_published(now)
        self._logger.info(f"Expired {count} jobs")
        return count

    # ------------------------------------------------------------------
    # Applications to a job
    # ------------------------------------------------------------------
    def apply_to_job(
        self,
        job_id: int,
        actor: Actor,
        data: ApplyRequest,
        now: Optional[datetime] = None,
    ) -> Application:
        job = self.get_job_by_id(job_id)
        if job.status != JobStatus.PUBLISHED:
            raise InvalidInputError("This job is not accepting applications")
        now = to_naive_utc(now) or utcnow()
        if job.is_expired(now):
            raise InvalidInputError("This job posting has expired")

        require_role(actor, UserRole.JOB_SEEKER, message="Only job seekers can apply to jobs")
        duplicate_message = "You have already applied to this job"
        if self.applications.find_for(job.id, actor.id) is not None:
            raise ConflictError(duplicate_message)

        applicant = self.users.get(actor.id)
        fallback_resume = applicant.profile.resume_url if applicant and applicant.profile else None

        # The unique constraint is the real guard against a concurrent double apply
        with self.conflict_on_duplicate(duplicate_message), transaction(self.db):
            application = Application(
                job_id=job.id,
                applicant_id=actor.id,
                cover_letter=_trimmed(data.cover_letter),
                resume_url=_trimmed(data.resume_url) or fallback_resume,
                status=ApplicationStatus.PENDING,
            )
            self.applications.add(application)

        self.db.refresh(application)
        self._logger.info(f"User {actor.id} applied to job {job.id}")
        return application

    def get_job_applications(self, job_id: int, actor: Actor, params: PageParams) -> Page:
        job = self._get_owned_job(job_id, actor, "You can only view applications for your own jobs")
        return self.applications.find_page(
            Equals("job_id", job.id),
            Ordering("applied_at", SortOrder.DESC),
            params,
        )

    def get_job_stats(self, job_id: int, actor: Actor, now: Optional[datetime] = None) -> Dict[str, Any]:
        job = self._get_owned_job(job_id, actor, "You can only view statistics for your own jobs")
        now = to_naive_utc(now) or utcnow()
        return {
            "job": job,
            "total_applications": self.jobs.count_applications(job.id),
            "applications_by_status": self.applications.counts_by_status(Equals("job_id", job.id)),
            "applications_over_time": self.applications.daily_counts(job.id, now - timedelta(days=30)),
        }
