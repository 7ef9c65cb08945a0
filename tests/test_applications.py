from datetime import timedelta

import pytest

from app.core.clock import utcnow
from app.core.exceptions import AccessDeniedError, ConflictError, InvalidInputError, NotFoundError
from app.core.pagination import PageParams
from app.models import Application, ApplicationStatus, JobStatus, UserRole
from app.schemas.application import ApplyRequest
from app.services.application_service import ApplicationService
from app.services.job_service import JobService

ALL = PageParams(page=1, limit=50)


@pytest.fixture
def application(db_session, company, make_job, seeker, as_actor):
    job = make_job(company)
    return JobService(db_session).apply_to_job(
        job.id, as_actor(seeker), ApplyRequest(cover_letter="  I would love to join.  ")
    )


def test_apply_creates_pending_application(application):
    assert application.status == ApplicationStatus.PENDING
    assert application.cover_letter == "I would love to join."


def test_second_application_conflicts(db_session, application, seeker, as_actor):
    with pytest.raises(ConflictError):
        JobService(db_session).apply_to_job(application.job_id, as_actor(seeker), ApplyRequest())
    rows = db_session.query(Application).filter(
        Application.job_id == application.job_id,
        Application.applicant_id == seeker.id,
    )
    assert rows.count() == 1


def test_unique_constraint_backs_up_the_precheck(db_session, application, seeker, as_actor, monkeypatch):
    service = JobService(db_session)
    # Simulate a concurrent request that passed the pre-check
    monkeypatch.setattr(service.applications, "find_for", lambda job_id, applicant_id: None)
    with pytest.raises(ConflictError):
        service.apply_to_job(application.job_id, as_actor(seeker), ApplyRequest())
    assert db_session.query(Application).count() == 1


@pytest.mark.parametrize("status", [JobStatus.DRAFT, JobStatus.CLOSED, JobStatus.EXPIRED])
def test_cannot_apply_to_unpublished_job(db_session, company, make_job, seeker, as_actor, status):
    job = make_job(company, status=status)
    with pytest.raises(InvalidInputError):
        JobService(db_session).apply_to_job(job.id, as_actor(seeker), ApplyRequest())


def test_cannot_apply_to_lapsed_job(db_session, company, make_job, seeker, as_actor):
    job = make_job(company, expires_at=utcnow() - timedelta(minutes=5))
    with pytest.raises(InvalidInputError):
        JobService(db_session).apply_to_job(job.id, as_actor(seeker), ApplyRequest())


def test_only_job_seekers_apply(db_session, company, make_job, employer, as_actor):
    job = make_job(company)
    with pytest.raises(AccessDeniedError):
        JobService(db_session).apply_to_job(job.id, as_actor(employer), ApplyRequest())


def test_apply_to_missing_job(db_session, seeker, as_actor):
    with pytest.raises(NotFoundError):
        JobService(db_session).apply_to_job(404, as_actor(seeker), ApplyRequest())


def test_views_differ_by_party(db_session, application, seeker, employer, as_actor):
    service = ApplicationService(db_session)

    own = service.get_application_by_id(application.id, as_actor(seeker))
    assert own["applicant"]["email"] == "seeker@example.com"

    hiring = service.get_application_by_id(application.id, as_actor(employer))
    assert "email" not in hiring["applicant"]
    assert hiring["applicant"]["profile"]["firstName"] == "Sam"


def test_third_party_cannot_view(db_session, application, make_user, as_actor):
    with pytest.raises(AccessDeniedError):
        ApplicationService(db_session).get_application_by_id(application.id, as_actor(make_user()))


def test_status_moves_until_final(db_session, application, employer, as_actor):
    service = ApplicationService(db_session)
    actor = as_actor(employer)

    assert service.update_application_status(application.id, actor, ApplicationStatus.SHORTLISTED).status == (
        ApplicationStatus.SHORTLISTED
    )
    service.update_application_status(application.id, actor, ApplicationStatus.REJECTED)
    with pytest.raises(InvalidInputError):
        service.update_application_status(application.id, actor, ApplicationStatus.ACCEPTED)


def test_only_hiring_employer_updates_status(db_session, application, make_user, as_actor):
    stranger = as_actor(make_user(UserRole.EMPLOYER))
    with pytest.raises(AccessDeniedError):
        ApplicationService(db_session).update_application_status(
            application.id, stranger, ApplicationStatus.REVIEWED
        )


def test_withdraw_own_application(db_session, application, seeker, as_actor):
    ApplicationService(db_session).withdraw_application(application.id, as_actor(seeker))
    assert db_session.query(Application).count() == 0


def test_cannot_withdraw_accepted(db_session, application, seeker, employer, as_actor):
    service = ApplicationService(db_session)
    service.update_application_status(application.id, as_actor(employer), ApplicationStatus.ACCEPTED)
    with pytest.raises(InvalidInputError):
        service.withdraw_application(application.id, as_actor(seeker))


def test_user_applications_filter_by_status(db_session, application, seeker, as_actor):
    service = ApplicationService(db_session)
    assert service.get_user_applications(as_actor(seeker), ALL).total == 1
    assert service.get_user_applications(as_actor(seeker), ALL, ApplicationStatus.ACCEPTED).total == 0


def test_company_applications_and_stats(db_session, application, employer, as_actor):
    service = ApplicationService(db_session)
    page = service.get_company_applications(as_actor(employer), ALL, job_id=application.job_id)
    assert [item.id for item in page.items] == [application.id]

    stats = service.get_application_stats(as_actor(employer))
    assert stats == {
        "total_applications": 1,
        "recent_applications": 1,
        "applications_by_status": {"PENDING": 1},
    }


def test_all_applications_is_admin_only(db_session, application, admin_user, employer, as_actor):
    service = ApplicationService(db_session)
    assert service.get_all_applications(as_actor(admin_user), ALL).total == 1
    with pytest.raises(AccessDeniedError):
        service.get_all_applications(as_actor(employer), ALL)
