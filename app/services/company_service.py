from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.clock import to_naive_utc, utcnow
from app.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from app.core.pagination import Page, PageParams
from app.core.predicates import Contains, Equals, Ordering, Range, SortOrder, all_of, any_of
from app.core.security import Actor
from app.database import transaction
from app.models.company import Company
from app.models.user import UserRole
from app.repositories import ApplicationRepository, CompanyRepository, UserRepository
from app.schemas.company import CompanyCreate, CompanyUpdate
from app.services.base import BaseService
from app.services.guards import require_owner, require_role

COMPANY_SEARCH_FIELDS = ("name", "description", "industry", "location")
NAME_TAKEN = "Company name already exists"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class CompanyService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.companies = CompanyRepository(db)
        self.users = UserRepository(db)
        self.applications = ApplicationRepository(db)

    def get_all_companies(self, params: PageParams) -> Page:
        return self.companies.find_page(None, Ordering("name", SortOrder.ASC), params)

    def get_company_by_id(self, company_id: int) -> Company:
        company = self.companies.get(company_id)
        if company is None:
            raise NotFoundError("Company not found")
        return company

    def get_my_company(self, actor: Actor) -> Company:
        company = self.companies.get_by_owner(actor.id)
        if company is None:
            raise NotFoundError("Company not found")
        return company

    @staticmethod
    def _validate_founded(founded: Optional[datetime]) -> Optional[datetime]:
        founded = to_naive_utc(founded)
        if founded is not None and founded > utcnow():
            raise InvalidInputError("Founded date cannot be in the future")
        return founded

    def _ensure_name_free(self, name: str, company_id: Optional[int] = None) -> None:
        existing = self.companies.get_by_name(name)
        if existing is not None and existing.id != company_id:
            raise ConflictError(NAME_TAKEN)

    def create_company(self, actor: Actor, data: CompanyCreate) -> Company:
        user = self.users.get(actor.id)
        if user is None:
            raise NotFoundError("User not found")
        require_role(actor, UserRole.EMPLOYER, message="Only employers can create companies")
        if self.companies.get_by_owner(actor.id) is not None:
            raise ConflictError("User already has a company")

        name = data.name.strip()
        founded = self._validate_founded(data.founded)
        self._ensure_name_free(name)

        # owner_id and the lower(name) index back up both checks above
        with self.conflict_on_duplicate(NAME_TAKEN), transaction(self.db):
            company = Company(
                name=name,
                description=_clean(data.description),
                website=str(data.website) if data.website else None,
                industry=_clean(data.industry),
                size=data.size,
                location=_clean(data.location),
                founded=founded,
                owner_id=actor.id,
            )
            self.companies.add(company)

        self.db.refresh(company)
        self._logger.info(f"Company {company.id} created by user {actor.id}")
        return company

    def update_company(self, company_id: int, actor: Actor, data: CompanyUpdate) -> Company:
        company = self.get_company_by_id(company_id)
        require_owner(company, actor, "You can only update your own company")

        changes: Dict[str, Any] = data.model_dump(exclude_unset=True)
        if "name" in changes:
            if changes["name"] is None:
                changes.pop("name")
            else:
                changes["name"] = changes["name"].strip()
                self._ensure_name_free(changes["name"], company.id)
        for field in ("description", "industry", "location"):
            if field in changes:
                changes[field] = _clean(changes[field])
        if "website" in changes and changes["website"] is not None:
            changes["website"] = str(changes["website"])
        if "founded" in changes:
            changes["founded"] = self._validate_founded(changes["founded"])

        with self.conflict_on_duplicate(NAME_TAKEN), transaction(self.db):
            for field, value in changes.items():
                setattr(company, field, value)
            self.db.flush()

        self.db.refresh(company)
        self._logger.info(f"Company {company.id} updated by user {actor.id}: {sorted(changes)}")
        return company

    def set_logo_url(self, actor: Actor, logo_url: str) -> Optional[str]:
        """
        Record the URL of a freshly stored logo on the actor's company.
        Returns the URL it replaced so the storage service can delete that blob.
        """
        company = self.get_my_company(actor)
        previous = company.logo_url
        with transaction(self.db):
            company.logo_url = logo_url
        return previous

    def delete_company(self, company_id: int, actor: Actor) -> List[str]:
        """Delete the company and return the stored file URLs it leaves behind."""
        company = self.get_company_by_id(company_id)
        require_owner(company, actor, "You can only delete your own company")
        if self.companies.has_published_jobs(company.id):
            raise InvalidInputError("Cannot delete company with active job postings. Close all jobs first.")

        with transaction(self.db):
            orphaned_files = [company.logo_url] if company.logo_url else []
            self.companies.delete(company)
        self._logger.info(f"Company {company_id} deleted by user {actor.id}")
        return orphaned_files

    def search_companies(self, query: str, params: PageParams) -> Page:
        term = (query or "").strip()
        if len(term) < 2:
            raise InvalidInputError("Search query must be at least 2 characters long")
        predicate = any_of(*(Contains(field, term) for field in COMPANY_SEARCH_FIELDS))
        return self.companies.find_page(predicate, Ordering("name", SortOrder.ASC), params)

    def get_company_stats(self, company_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
        company = self.get_company_by_id(company_id)
        now = to_naive_utc(now) or utcnow()
        jobs_by_status = self.companies.job_counts_by_status(company.id)
        of_company = Equals("job.company_id", company.id)
        return {
            "company": {"id": company.id, "name": company.name, "total_jobs": sum(jobs_by_status.values())},
            "jobs_by_status": jobs_by_status,
            "total_applications": self.applications.count(of_company),
            "recent_applications": self.applications.count(
                all_of(of_company, Range("applied_at", gte=now - timedelta(days=30)))
            ),
            "created_at": company.created_at,
        }

    def get_companies_by_industry(self) -> List[Dict[str, object]]:
        return self.companies.industries()
