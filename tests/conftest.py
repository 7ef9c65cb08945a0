import itertools
import os
from datetime import timedelta

import pytest

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from fastapi.testclient import TestClient

from app.core.clock import utcnow
from app.core.security import Actor, create_access_token, get_password_hash
from app.database import Database
from app.main import create_app
from app.models import (
    Category,
    Company,
    ExperienceLevel,
    Job,
    JobSkill,
    JobStatus,
    JobType,
    Profile,
    Skill,
    User,
    UserRole,
)

_sequence = itertools.count(1)


@pytest.fixture(scope="function")
def database():
    """A fresh in-memory database for every test."""
    db = Database("sqlite://")
    db.connect()
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture(scope="function")
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(database):
    """TestClient bound to the per-test database."""
    app = create_app(database)
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def make_user(db_session):
    def _make_user(role=UserRole.JOB_SEEKER, email=None, is_active=True, resume_url=None, **profile):
        user = User(
            email=email or f"user{next(_sequence)}@example.com",
            hashed_password=get_password_hash("Password123!"),
            role=role,
            is_active=is_active,
        )
        user.profile = Profile(resume_url=resume_url, **profile)
        db_session.add(user)
        db_session.commit()
        return user
    return _make_user


@pytest.fixture(scope="function")
def admin_user(make_user):
    return make_user(UserRole.ADMIN, email="admin@example.com")


@pytest.fixture(scope="function")
def employer(make_user):
    return make_user(UserRole.EMPLOYER, email="employer@example.com")


@pytest.fixture(scope="function")
def seeker(make_user):
    return make_user(UserRole.JOB_SEEKER, email="seeker@example.com", first_name="Sam", last_name="Seeker")


@pytest.fixture(scope="function")
def make_company(db_session):
    def _make_company(owner, name=None, **fields):
        company = Company(name=name or f"Company {next(_sequence)}", owner_id=owner.id, **fields)
        db_session.add(company)
        db_session.commit()
        return company
    return _make_company


@pytest.fixture(scope="function")
def company(make_company, employer):
    return make_company(employer, name="Acme", industry="Software", location="Berlin")


@pytest.fixture(scope="function")
def category(db_session):
    category = Category(name="Engineering", slug="engineering")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope="function")
def make_skill(db_session):
    def _make_skill(name, label=None):
        skill = Skill(name=name, category=label)
        db_session.add(skill)
        db_session.commit()
        return skill
    return _make_skill


@pytest.fixture(scope="function")
def make_job(db_session):
    """
    Insert a job directly. ``age_minutes`` backdates created_at so that
    newest-first ordering is deterministic.
    """
    def _make_job(
        company,
        title="Backend Engineer",
        status=JobStatus.PUBLISHED,
        age_minutes=0,
        skills=(),
        **fields,
    ):
        created = utcnow() - timedelta(minutes=age_minutes)
        fields.setdefault("description", "Build and run the services behind the product")
        fields.setdefault("type", JobType.FULL_TIME)
        fields.setdefault("experience_level", ExperienceLevel.MID)
        job = Job(
            title=title,
            status=status,
            company_id=company.id,
            posted_by_id=company.owner_id,
            created_at=created,
            updated_at=created,
            **fields,
        )
        job.job_skills = [JobSkill(skill_id=skill.id) for skill in skills]
        db_session.add(job)
        db_session.commit()
        return job
    return _make_job


@pytest.fixture(scope="function")
def as_actor():
    """The authenticated-caller view of a user, as the token layer builds it."""
    def _as_actor(user) -> Actor:
        return Actor(id=user.id, email=user.email, role=user.role)
    return _as_actor


@pytest.fixture(scope="function")
def auth_headers():
    def _auth_headers(user):
        token = create_access_token(data={"sub": str(user.id), "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers
