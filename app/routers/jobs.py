from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.pagination import PageParams
from app.core.schemas import serialize
from app.core.security import Actor
from app.database import get_db
from app.routers.auth_deps import get_current_actor
from app.routers.params import ok, ok_item, ok_page, page_params, parse_id_list
from app.schemas.application import ApplicationEmployerView, ApplicationOut, ApplyRequest
from app.schemas.job import JobCreate, JobOut, JobStatsOut, JobUpdate
from app.services.job_filters import JobFilterParams
from app.services.job_service import JobService

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def job_filter_params(
    search: Optional[str] = Query(None),
    category: Optional[int] = Query(None),
    type: Optional[str] = Query(None),
    experience_level: Optional[str] = Query(None, alias="experienceLevel"),
    location: Optional[str] = Query(None),
    is_remote: Optional[bool] = Query(None, alias="isRemote"),
    salary_min: Optional[float] = Query(None, alias="salaryMin"),
    salary_max: Optional[float] = Query(None, alias="salaryMax"),
    skills: Optional[List[str]] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
) -> JobFilterParams:
    return JobFilterParams(
        search=search,
        category=category,
        type=type,
        experience_level=experience_level,
        location=location,
        is_remote=is_remote,
        salary_min=salary_min,
        salary_max=salary_max,
        skills=tuple(parse_id_list(skills)),
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("")
def list_jobs(
    params: PageParams = Depends(page_params),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: Session = Depends(get_db),
):
    """Active job postings, newest first unless another sort is asked for."""
    page = JobService(db).get_all_jobs(params, sort_by, sort_order)
    return ok_page(JobOut, page, "Jobs retrieved successfully")


@router.get("/search")
def search_jobs(
    filters: JobFilterParams = Depends(job_filter_params),
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    page = JobService(db).search_jobs(filters, params)
    return ok_page(JobOut, page, "Jobs retrieved successfully")


@router.get("/trending")
def trending_jobs(limit: int = Query(10, ge=1, le=50), db: Session = Depends(get_db)):
    ranked = JobService(db).get_trending_jobs(limit)
    data = [{**serialize(JobOut, job), "recentApplications": count} for job, count in ranked]
    return ok(data, "Trending jobs retrieved successfully")


@router.get("/location/{location}")
def jobs_by_location(
    location: str,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    page = JobService(db).get_jobs_by_location(location, params)
    return ok_page(JobOut, page, "Jobs retrieved successfully")


@router.get("/my-jobs")
def my_jobs(
    params: PageParams = Depends(page_params),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    page = JobService(db).get_jobs_by_employer(actor, params)
    return ok_page(JobOut, page, "Jobs retrieved successfully")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_job(
    job_in: JobCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    job = JobService(db).create_job(actor, job_in)
    return ok_item(JobOut, job, "Job created successfully")


@router.get("/{job_id}")
def get_job(job_id: int, db: Session = Depends(get_db)):
    job = JobService(db).get_job_by_id(job_id)
    return ok_item(JobOut, job, "Job retrieved successfully")


@router.put("/{job_id}")
def update_job(
    job_id: int,
    job_in: JobUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    job = JobService(db).update_job(job_id, actor, job_in)
    return ok_item(JobOut, job, "Job updated successfully")


@router.delete("/{job_id}")
def delete_job(
    job_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    JobService(db).delete_job(job_id, actor)
    return ok(None, "Job deleted successfully")


@router.patch("/{job_id}/publish")
def publish_job(
    job_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    job = JobService(db).publish_job(job_id, actor)
    return ok_item(JobOut, job, "Job published successfully")


@router.patch("/{job_id}/close")
def close_job(
    job_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    job = JobService(db).close_job(job_id, actor)
    return ok_item(JobOut, job, "Job closed successfully")


@router.get("/{job_id}/similar")
def similar_jobs(job_id: int, limit: int = Query(5, ge=1, le=20), db: Session = Depends(get_db)):
    jobs = JobService(db).get_similar_jobs(job_id, limit)
    return ok(serialize(JobOut, jobs), "Similar jobs retrieved successfully")


@router.get("/{job_id}/stats")
def job_stats(
    job_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    stats = JobService(db).get_job_stats(job_id, actor)
    return ok_item(JobStatsOut, stats, "Job statistics retrieved successfully")


@router.post("/{job_id}/apply", status_code=status.HTTP_201_CREATED)
def apply_to_job(
    job_id: int,
    application_in: ApplyRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    application = JobService(db).apply_to_job(job_id, actor, application_in)
    return ok_item(ApplicationOut, application, "Application submitted successfully")


@router.get("/{job_id}/applications")
def job_applications(
    job_id: int,
    params: PageParams = Depends(page_params),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    page = JobService(db).get_job_applications(job_id, actor, params)
    return ok_page(ApplicationEmployerView, page, "Applications retrieved successfully")
