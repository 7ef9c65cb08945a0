from datetime import timedelta

import pytest

from app.core.clock import utcnow
from app.core.pagination import PageParams
from app.core.predicates import Contains, Equals, OneOf, Ordering, Range, SortOrder, all_of, any_of
from app.models import JobStatus, UserRole, UserSkill
from app.repositories import CompanyRepository, JobRepository, SkillRepository


@pytest.fixture
def jobs(db_session):
    return JobRepository(db_session)


def test_dotted_path_walks_to_one_relationship(jobs, company, make_company, make_user, make_job):
    other = make_company(make_user(UserRole.EMPLOYER), name="Globex")
    mine = make_job(company, title="Acme job")
    make_job(other, title="Globex job")

    found = jobs.find(Contains("company.name", "acme"))
    assert [job.id for job in found] == [mine.id]


def test_dotted_path_walks_collections(jobs, company, make_job, make_skill):
    python, go, rust = make_skill("Python"), make_skill("Go"), make_skill("Rust")
    both = make_job(company, title="Polyglot", skills=[python, go])
    make_job(company, title="Rustacean", skills=[rust])

    found = jobs.find(OneOf("job_skills.skill_id", (go.id,)))
    assert [job.id for job in found] == [both.id]


def test_empty_one_of_matches_nothing(jobs, company, make_job):
    make_job(company)
    assert jobs.find(OneOf("id", ())) == []


def test_equals_none_is_null_check(jobs, company, make_job):
    open_ended = make_job(company, title="Open ended")
    make_job(company, title="Dated", expires_at=utcnow() + timedelta(days=3))
    assert [job.id for job in jobs.find(Equals("expires_at", None))] == [open_ended.id]


def test_contains_escapes_wildcards(jobs, company, make_job):
    literal = make_job(company, title="Save 100% of your time")
    make_job(company, title="Save 1000 hours")
    assert [job.id for job in jobs.find(Contains("title", "100%"))] == [literal.id]


def test_range_bounds_combine(jobs, company, make_job):
    make_job(company, title="Low", salary_max=2000)
    mid = make_job(company, title="Mid", salary_max=5000)
    make_job(company, title="High", salary_max=9000)
    found = jobs.find(Range("salary_max", gte=3000, lte=6000))
    assert [job.id for job in found] == [mid.id]


def test_unknown_field_is_rejected(jobs):
    with pytest.raises(ValueError):
        jobs.find(Equals("no_such_column", 1))


def test_ordering_through_relationship(jobs, make_company, make_user, make_job):
    zeta = make_company(make_user(UserRole.EMPLOYER), name="Zeta")
    alpha = make_company(make_user(UserRole.EMPLOYER), name="Alpha")
    z_job = make_job(zeta)
    a_job = make_job(alpha)

    found = jobs.find(None, Ordering("company.name", SortOrder.ASC))
    assert [job.id for job in found] == [a_job.id, z_job.id]


def test_ties_break_on_id(jobs, company, make_job):
    first = make_job(company, title="Same")
    second = make_job(company, title="Same")
    found = jobs.find(Equals("title", "Same"), Ordering("title", SortOrder.DESC))
    assert [job.id for job in found] == [second.id, first.id]


def test_find_page_total_matches_unpaged_count(jobs, company, make_job):
    for minutes in range(7):
        make_job(company, title=f"Job {minutes}", age_minutes=minutes)
    predicate = all_of(Equals("status", JobStatus.PUBLISHED), any_of(Contains("title", "job")))

    page = jobs.find_page(predicate, Ordering("created_at"), PageParams(page=2, limit=3))

    assert page.total == len(jobs.find(predicate)) == 7
    assert [job.title for job in page.items] == ["Job 3", "Job 4", "Job 5"]
    assert page.has_next is True


def test_company_industries_group_and_count(db_session, make_company, make_user):
    for industry in ("Software", "software", "Retail", None):
        make_company(make_user(UserRole.EMPLOYER), industry=industry)

    industries = {row["industry"]: row["count"] for row in CompanyRepository(db_session).industries()}
    assert industries.get("Retail") == 1
    assert None not in industries


def test_skill_popularity_counts_jobs_and_users(db_session, company, make_job, make_skill, seeker):
    python, go = make_skill("Python"), make_skill("Go")
    make_job(company, skills=[python])
    make_job(company, skills=[python, go])
    db_session.add(UserSkill(user_id=seeker.id, skill_id=go.id))
    db_session.commit()

    ranked = SkillRepository(db_session).popular(limit=5)
    assert [(skill.name, job_count, user_count) for skill, job_count, user_count in ranked] == [
        ("Python", 2, 0),
        ("Go", 1, 1),
    ]
