from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.core.clock import to_naive_utc, utcnow
from app.core.exceptions import AccessDeniedError, InvalidInputError, NotFoundError
from app.core.pagination import Page, PageParams
from app.core.predicates import Equals, Ordering, Range, SortOrder, all_of
from app.core.schemas import serialize
from app.core.security import Actor
from app.database import transaction
from app.models.application import Application, ApplicationStatus
from app.models.user import UserRole
from app.repositories import ApplicationRepository, CompanyRepository
from app.schemas.application import ApplicationApplicantView, ApplicationEmployerView
from app.services.base import BaseService
from app.services.guards import actor_owns, require_owner, require_role

LATEST_FIRST = Ordering("applied_at", SortOrder.DESC)


class ApplicationService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.applications = ApplicationRepository(db)
        self.companies = CompanyRepository(db)

    def _get(self, application_id: int) -> Application:
        application = self.applications.get(application_id)
        if application is None:
            raise NotFoundError("Application not found")
        return application

    def get_user_applications(
        self,
        actor: Actor,
        params: PageParams,
        status: Optional[ApplicationStatus] = None,
    ) -> Page:
        predicate = Equals("applicant_id", actor.id)
        if status is not None:
            predicate = all_of(predicate, Equals("status", status))
        return self.applications.find_page(predicate, LATEST_FIRST, params)

    def get_application_by_id(self, application_id: int, actor: Actor) -> Dict[str, Any]:
        """
        The applicant sees the full record. The hiring employer sees the
        applicant reduced to id, profile and skills.
        """
        application = self._get(application_id)
        is_applicant = application.applicant_id == actor.id
        is_employer = actor_owns(application.job.company, actor)
        if not is_applicant and not is_employer:
            raise AccessDeniedError("You do not have permission to view this application")

        if is_applicant:
            return serialize(ApplicationApplicantView, application)
        return serialize(ApplicationEmployerView, application)

    def withdraw_application(self, application_id: int, actor: Actor) -> None:
        application = self._get(application_id)
        if application.applicant_id != actor.id:
            raise AccessDeniedError("You can only withdraw your own applications")
        if application.status == ApplicationStatus.ACCEPTED:
            raise InvalidInputError("Cannot withdraw an accepted application")

        with transaction(self.db):
            self.applications.delete(application)
        self._logger.info(f"Application {application_id} withdrawn by user {actor.id}")

    def _company_of(self, actor: Actor):
        company = self.companies.get_by_owner(actor.id)
        if company is None:
            raise NotFoundError("Company not found")
        return company

    def get_company_applications(
        self,
        actor: Actor,
        params: PageParams,
        status: Optional[ApplicationStatus] = None,
        job_id: Optional[int] = None,
    ) -> Page:
        company = self._company_of(actor)
        clauses = [Equals("job.company_id", company.id)]
        if status is not None:
            clauses.append(Equals("status", status))
        if job_id is not None:
            clauses.append(Equals("job_id", job_id))
        return self.applications.find_page(all_of(*clauses), LATEST_FIRST, params)

    def update_application_status(
        self,
        application_id: int,
        actor: Actor,
        status: ApplicationStatus,
    ) -> Application:
        application = self._get(application_id)
        require_owner(
            application.job.company,
            actor,
            "You can only update applications for your own jobs",
        )
        try:
            status = ApplicationStatus(status)
        except ValueError:
            raise InvalidInputError("Invalid application status")
        if application.is_final:
            raise InvalidInputError("Cannot change status of finalized applications")

        previous = application.status
        with transaction(self.db):
            application.status = status
            self.db.flush()

        self.db.refresh(application)
        self._logger.info(
            f"Application {application.id} {previous.value} -> {status.value} by user {actor.id}"
        )
        return application

    def get_all_applications(
        self,
        actor: Actor,
        params: PageParams,
        status: Optional[ApplicationStatus] = None,
    ) -> Page:
        require_role(actor, UserRole.ADMIN)
        predicate = Equals("status", status) if status is not None else None
        return self.applications.find_page(predicate, LATEST_FIRST, params)

    def get_application_stats(self, actor: Actor, now: Optional[datetime] = None) -> Dict[str, Any]:
        company = self._company_of(actor)
        now = to_naive_utc(now) or utcnow()
        of_company = Equals("job.company_id", company.id)
        return {
            "total_applications": self.applications.count(of_company),
            "recent_applications": self.applications.count(
                all_of(of_company, Range("applied_at", gte=now - timedelta(days=30)))
            ),
            "applications_by_status": self.applications.counts_by_status(of_company),
        }
