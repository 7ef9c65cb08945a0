from datetime import date

import pytest

from app.core.clock import utcnow
from app.core.exceptions import AccessDeniedError, ConflictError, InvalidInputError, NotFoundError
from app.core.pagination import PageParams
from app.core.security import verify_password
from app.models import UserRole
from app.schemas.user import ProfileUpdate, UserRegister, UserSkillCreate
from app.services.user_service import UserService

ALL = PageParams(page=1, limit=50)


def test_register_normalises_email_and_hashes_password(db_session):
    user = UserService(db_session).register_user(
        UserRegister(email="New.User@Example.com", password="Password123!", first_name=" Ada ")
    )
    assert user.email == "new.user@example.com"
    assert verify_password("Password123!", user.hashed_password)
    assert user.profile.first_name == "Ada"


def test_register_rejects_taken_email(db_session, seeker):
    with pytest.raises(ConflictError):
        UserService(db_session).register_user(UserRegister(email="SEEKER@example.com", password="Password123!"))


def test_admin_accounts_cannot_self_register(db_session):
    with pytest.raises(AccessDeniedError):
        UserService(db_session).register_user(
            UserRegister(email="root@example.com", password="Password123!", role=UserRole.ADMIN)
        )


def test_deleting_account_tombstones_email(db_session, seeker, as_actor):
    service = UserService(db_session)
    service.set_avatar_url(as_actor(seeker), "https://cdn.example.com/me.png")

    orphaned = service.delete_user(as_actor(seeker))

    assert orphaned == ["https://cdn.example.com/me.png"]
    assert seeker.is_active is False
    assert seeker.deactivated_at is not None
    assert seeker.email.startswith("deleted+") and seeker.email.endswith("@deleted.invalid")
    # The address is free again
    again = service.register_user(UserRegister(email="seeker@example.com", password="Password123!"))
    assert again.id != seeker.id


def test_tombstones_never_collide(db_session, make_user, as_actor):
    service = UserService(db_session)
    first, second = make_user(), make_user()
    service.delete_user(as_actor(first))
    service.delete_user(as_actor(second))
    assert first.email != second.email


def test_deactivated_user_hidden_from_non_admins(db_session, seeker, admin_user, as_actor):
    service = UserService(db_session)
    service.delete_user(as_actor(seeker))
    with pytest.raises(AccessDeniedError):
        service.get_user_by_id(seeker.id)
    assert service.get_user_by_id(seeker.id, as_actor(admin_user)).id == seeker.id


def test_profile_update_enforces_minimum_age(db_session, seeker, as_actor):
    today = utcnow().date()
    too_young = date(today.year - 12, 1, 1)
    with pytest.raises(InvalidInputError):
        UserService(db_session).update_profile(as_actor(seeker), ProfileUpdate(date_of_birth=too_young))


def test_profile_update_is_partial(db_session, seeker, as_actor):
    user = UserService(db_session).update_profile(
        as_actor(seeker), ProfileUpdate(bio="  Backend developer  ", website="https://sam.example.com")
    )
    assert user.profile.bio == "Backend developer"
    assert user.profile.first_name == "Sam"
    assert user.profile.website.startswith("https://sam.example.com")


def test_resume_replacement_returns_previous(db_session, seeker, as_actor):
    service = UserService(db_session)
    assert service.set_resume_url(as_actor(seeker), "https://cdn.example.com/v1.pdf") is None
    assert service.set_resume_url(as_actor(seeker), "https://cdn.example.com/v2.pdf") == "https://cdn.example.com/v1.pdf"


def test_user_skills(db_session, seeker, make_skill, as_actor):
    python = make_skill("Python")
    service = UserService(db_session)

    service.add_skill(as_actor(seeker), UserSkillCreate(skill_id=python.id, proficiency="Expert", years_of_exp=6))
    assert [s.skill.name for s in service.get_user_skills(seeker.id)] == ["Python"]

    with pytest.raises(ConflictError):
        service.add_skill(as_actor(seeker), UserSkillCreate(skill_id=python.id))
    with pytest.raises(NotFoundError):
        service.add_skill(as_actor(seeker), UserSkillCreate(skill_id=999))

    service.remove_skill(as_actor(seeker), python.id)
    assert service.get_user_skills(seeker.id) == []


def test_years_of_experience_bounds(db_session, seeker, make_skill, as_actor):
    go = make_skill("Go")
    with pytest.raises(InvalidInputError):
        UserService(db_session).add_skill(as_actor(seeker), UserSkillCreate(skill_id=go.id, years_of_exp=51))


def test_public_directory_lists_active_job_seekers(db_session, seeker, employer, make_user):
    make_user(is_active=False)
    page = UserService(db_session).get_all_users(ALL)
    assert [user.id for user in page.items] == [seeker.id]


def test_admin_listing_filters(db_session, seeker, employer, admin_user, as_actor):
    service = UserService(db_session)
    assert service.get_all_users_admin(as_actor(admin_user), ALL, role=UserRole.EMPLOYER).total == 1
    assert [u.id for u in service.get_all_users_admin(as_actor(admin_user), ALL, search="sam").items] == [seeker.id]
    with pytest.raises(AccessDeniedError):
        service.get_all_users_admin(as_actor(employer), ALL)


def test_admin_toggles_status_but_not_own(db_session, seeker, admin_user, as_actor):
    service = UserService(db_session)
    user = service.update_user_status(as_actor(admin_user), seeker.id, False)
    assert user.is_active is False and user.deactivated_at is not None

    user = service.update_user_status(as_actor(admin_user), seeker.id, True)
    assert user.is_active is True and user.deactivated_at is None

    with pytest.raises(InvalidInputError):
        service.update_user_status(as_actor(admin_user), admin_user.id, False)


def test_deleted_account_cannot_be_reactivated(db_session, seeker, admin_user, as_actor):
    service = UserService(db_session)
    service.delete_user(as_actor(seeker))
    with pytest.raises(InvalidInputError):
        service.update_user_status(as_actor(admin_user), seeker.id, True)
    assert seeker.is_active is False
