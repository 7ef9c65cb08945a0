from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.pagination import PageParams
from app.core.schemas import serialize
from app.core.security import Actor
from app.database import get_db
from app.routers.auth_deps import get_current_actor
from app.routers.params import ok, ok_item, ok_page, page_params
from app.schemas.company import (
    CompanyCreate,
    CompanyOut,
    CompanyStatsOut,
    CompanyUpdate,
    IndustryCount,
    LogoUpdate,
)
from app.services.company_service import CompanyService

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("")
def list_companies(params: PageParams = Depends(page_params), db: Session = Depends(get_db)):
    page = CompanyService(db).get_all_companies(params)
    return ok_page(CompanyOut, page, "Companies retrieved successfully")


@router.get("/search")
def search_companies(
    q: str = Query("", description="At least 2 characters"),
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    page = CompanyService(db).search_companies(q, params)
    return ok_page(CompanyOut, page, "Companies retrieved successfully")


@router.get("/industries")
def companies_by_industry(db: Session = Depends(get_db)):
    industries = CompanyService(db).get_companies_by_industry()
    return ok(serialize(IndustryCount, industries), "Industries retrieved successfully")


@router.get("/me")
def my_company(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    company = CompanyService(db).get_my_company(actor)
    return ok_item(CompanyOut, company, "Company retrieved successfully")


@router.put("/me/logo")
def set_logo(
    logo_in: LogoUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Record the URL returned by the storage service for an uploaded logo."""
    previous = CompanyService(db).set_logo_url(actor, logo_in.logo_url)
    return ok({"logoUrl": logo_in.logo_url, "previousLogoUrl": previous}, "Logo updated successfully")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_company(
    company_in: CompanyCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    company = CompanyService(db).create_company(actor, company_in)
    return ok_item(CompanyOut, company, "Company created successfully")


@router.get("/{company_id}")
def get_company(company_id: int, db: Session = Depends(get_db)):
    company = CompanyService(db).get_company_by_id(company_id)
    return ok_item(CompanyOut, company, "Company retrieved successfully")


@router.get("/{company_id}/stats")
def company_stats(company_id: int, db: Session = Depends(get_db)):
    stats = CompanyService(db).get_company_stats(company_id)
    return ok_item(CompanyStatsOut, stats, "Company statistics retrieved successfully")


@router.put("/{company_id}")
def update_company(
    company_id: int,
    company_in: CompanyUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    company = CompanyService(db).update_company(company_id, actor, company_in)
    return ok_item(CompanyOut, company, "Company updated successfully")


@router.delete("/{company_id}")
def delete_company(
    company_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    orphaned_files = CompanyService(db).delete_company(company_id, actor)
    return ok({"filesToDelete": orphaned_files}, "Company deleted successfully")
