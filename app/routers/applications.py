from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.pagination import PageParams
from app.core.security import Actor
from app.database import get_db
from app.models.application import ApplicationStatus
from app.routers.auth_deps import get_current_actor
from app.routers.params import ok, ok_item, ok_page, page_params
from app.schemas.application import (
    ApplicationApplicantView,
    ApplicationEmployerView,
    ApplicationOut,
    ApplicationStatsOut,
    ApplicationStatusUpdate,
)
from app.services.application_service import ApplicationService

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("")
def all_applications(
    params: PageParams = Depends(page_params),
    status: Optional[ApplicationStatus] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    page = ApplicationService(db).get_all_applications(actor, params, status)
    return ok_page(ApplicationApplicantView, page, "Applications retrieved successfully")


@router.get("/me")
def my_applications(
    params: PageParams = Depends(page_params),
    status: Optional[ApplicationStatus] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    page = ApplicationService(db).get_user_applications(actor, params, status)
    return ok_page(ApplicationOut, page, "Applications retrieved successfully")


@router.get("/company")
def company_applications(
    params: PageParams = Depends(page_params),
    status: Optional[ApplicationStatus] = Query(None),
    job_id: Optional[int] = Query(None, alias="jobId"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    page = ApplicationService(db).get_company_applications(actor, params, status=status, job_id=job_id)
    return ok_page(ApplicationEmployerView, page, "Applications retrieved successfully")


@router.get("/stats")
def application_stats(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    stats = ApplicationService(db).get_application_stats(actor)
    return ok_item(ApplicationStatsOut, stats, "Application statistics retrieved successfully")


@router.get("/{application_id}")
def get_application(
    application_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    data = ApplicationService(db).get_application_by_id(application_id, actor)
    return ok(data, "Application retrieved successfully")


@router.patch("/{application_id}/status")
def update_status(
    application_id: int,
    status_in: ApplicationStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    application = ApplicationService(db).update_application_status(application_id, actor, status_in.status)
    return ok_item(ApplicationOut, application, "Application status updated successfully")


@router.delete("/{application_id}")
def withdraw_application(
    application_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    ApplicationService(db).withdraw_application(application_id, actor)
    return ok(None, "Application withdrawn successfully")
