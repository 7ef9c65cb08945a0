from datetime import timedelta

import pytest

from app.core.clock import utcnow
from app.core.exceptions import AccessDeniedError, ConflictError, InvalidInputError, NotFoundError
from app.core.pagination import PageParams
from app.models import Application, JobStatus, UserRole
from app.schemas.company import CompanyCreate, CompanyUpdate
from app.services.company_service import CompanyService

ALL = PageParams(page=1, limit=50)


def test_employer_creates_one_company(db_session, employer, as_actor):
    service = CompanyService(db_session)
    company = service.create_company(
        as_actor(employer), CompanyCreate(name="  Hooli  ", website="https://hooli.example.com")
    )
    assert company.name == "Hooli"
    assert company.website.startswith("https://hooli.example.com")
    with pytest.raises(ConflictError):
        service.create_company(as_actor(employer), CompanyCreate(name="Hooli Two"))


def test_company_names_are_case_insensitive(db_session, company, make_user, as_actor):
    other = as_actor(make_user(UserRole.EMPLOYER))
    with pytest.raises(ConflictError):
        CompanyService(db_session).create_company(other, CompanyCreate(name="ACME"))


def test_only_employers_create_companies(db_session, seeker, as_actor):
    with pytest.raises(AccessDeniedError):
        CompanyService(db_session).create_company(as_actor(seeker), CompanyCreate(name="Side Hustle"))


def test_founded_cannot_be_in_future(db_session, employer, as_actor):
    with pytest.raises(InvalidInputError):
        CompanyService(db_session).create_company(
            as_actor(employer), CompanyCreate(name="Tomorrow Inc", founded=utcnow() + timedelta(days=30))
        )


def test_update_is_owner_only(db_session, company, make_user, employer, as_actor):
    service = CompanyService(db_session)
    updated = service.update_company(company.id, as_actor(employer), CompanyUpdate(location="Munich"))
    assert updated.location == "Munich"
    assert updated.name == "Acme"

    with pytest.raises(AccessDeniedError):
        service.update_company(company.id, as_actor(make_user(UserRole.EMPLOYER)), CompanyUpdate(name="Mine"))


def test_logo_replacement_returns_previous_url(db_session, company, employer, as_actor):
    service = CompanyService(db_session)
    assert service.set_logo_url(as_actor(employer), "https://cdn.example.com/a.png") is None
    assert service.set_logo_url(as_actor(employer), "https://cdn.example.com/b.png") == "https://cdn.example.com/a.png"


def test_delete_blocked_by_published_jobs(db_session, company, make_job, employer, as_actor):
    company_id = company.id
    job = make_job(company)
    service = CompanyService(db_session)
    with pytest.raises(InvalidInputError):
        service.delete_company(company_id, as_actor(employer))

    job.status = JobStatus.CLOSED
    db_session.commit()
    service.delete_company(company_id, as_actor(employer))
    with pytest.raises(NotFoundError):
        service.get_company_by_id(company_id)


def test_search_requires_two_characters(db_session):
    with pytest.raises(InvalidInputError):
        CompanyService(db_session).search_companies("a", ALL)


def test_search_matches_industry(db_session, company, make_company, make_user):
    make_company(make_user(UserRole.EMPLOYER), name="Bakery", industry="Food")
    page = CompanyService(db_session).search_companies("soft", ALL)
    assert [c.id for c in page.items] == [company.id]


def test_job_count_counts_published_only(db_session, company, make_job):
    make_job(company)
    make_job(company, status=JobStatus.DRAFT)
    db_session.expire_all()
    assert CompanyService(db_session).get_company_by_id(company.id).job_count == 1


def test_company_stats(db_session, company, make_job, seeker):
    job = make_job(company)
    make_job(company, status=JobStatus.CLOSED)
    db_session.add(Application(job_id=job.id, applicant_id=seeker.id))
    db_session.commit()

    stats = CompanyService(db_session).get_company_stats(company.id)
    assert stats["company"]["total_jobs"] == 2
    assert stats["jobs_by_status"] == {"PUBLISHED": 1, "CLOSED": 1}
    assert stats["total_applications"] == 1
    assert stats["recent_applications"] == 1


def test_my_company_missing(db_session, make_user, as_actor):
    with pytest.raises(NotFoundError):
        CompanyService(db_session).get_my_company(as_actor(make_user(UserRole.EMPLOYER)))


def test_delete_returns_logo_for_cleanup(db_session, company, employer, as_actor):
    service = CompanyService(db_session)
    service.set_logo_url(as_actor(employer), "https://cdn.example.com/logo.png")
    assert service.delete_company(company.id, as_actor(employer)) == ["https://cdn.example.com/logo.png"]


def test_delete_without_logo_returns_nothing(db_session, company, employer, as_actor):
    assert CompanyService(db_session).delete_company(company.id, as_actor(employer)) == []
