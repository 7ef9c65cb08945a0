"""
User Service Layer

Accounts, profiles and the skills a user lists. File bytes live in the
external storage service; this layer only records and hands back URLs.
"""
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.exceptions import AccessDeniedError, ConflictError, InvalidInputError, NotFoundError
from app.core.pagination import Page, PageParams
from app.core.predicates import Contains, Equals, Ordering, Predicate, SortOrder, all_of, any_of
from app.core.security import Actor, get_password_hash
from app.database import transaction
from app.models.user import Profile, User, UserRole, UserSkill
from app.repositories import SkillRepository, UserRepository
from app.schemas.user import ProfileUpdate, UserRegister, UserSkillCreate
from app.services.base import BaseService
from app.services.guards import is_admin, require_role

MIN_AGE_YEARS = 13
MAX_YEARS_OF_EXPERIENCE = 50
TOMBSTONE_DOMAIN = "deleted.invalid"
EMAIL_TAKEN = "User with this email already exists"
NEWEST_FIRST = Ordering("created_at", SortOrder.DESC)


def tombstone_email() -> str:
    """A unique, undeliverable address that frees the original for reuse."""
    return f"deleted+{uuid.uuid4().hex}@{TOMBSTONE_DOMAIN}"


def _age_on(birth: date, today: date) -> int:
    return today.year - birth.year - ((today.month, today.day) < (birth.month, birth.day))


class UserService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.users = UserRepository(db)
        self.skills = SkillRepository(db)

    def register_user(self, data: UserRegister) -> User:
        if data.role == UserRole.ADMIN:
            raise AccessDeniedError("Admin accounts cannot be self-registered")
        email = data.email.strip().lower()
        if self.users.get_by_email(email) is not None:
            raise ConflictError(EMAIL_TAKEN)

        with self.conflict_on_duplicate(EMAIL_TAKEN), transaction(self.db):
            user = User(
                email=email,
                hashed_password=get_password_hash(data.password),
                role=data.role,
                is_active=True,
            )
            user.profile = Profile(
                first_name=(data.first_name or "").strip() or None,
                last_name=(data.last_name or "").strip() or None,
            )
            self.users.add(user)

        self.db.refresh(user)
        self._logger.info(f"User {user.id} registered as {user.role.value}")
        return user

    def get_all_users(self, params: PageParams) -> Page:
        """Public directory: active job seekers only."""
        predicate = all_of(Equals("role", UserRole.JOB_SEEKER), Equals("is_active", True))
        return self.users.find_page(predicate, NEWEST_FIRST, params)

    def get_user_by_id(self, user_id: int, actor: Optional[Actor] = None) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not user.is_active and not (actor is not None and is_admin(actor)):
            raise AccessDeniedError("User account is deactivated")
        return user

    def _get_self(self, actor: Actor) -> User:
        user = self.users.get(actor.id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, actor: Actor, data: ProfileUpdate) -> User:
        user = self._get_self(actor)
        changes: Dict[str, Any] = data.model_dump(exclude_unset=True)

        if changes.get("website") is not None:
            changes["website"] = str(changes["website"])
        if changes.get("date_of_birth") is not None:
            if _age_on(changes["date_of_birth"], utcnow().date()) < MIN_AGE_YEARS:
                raise InvalidInputError(f"User must be at least {MIN_AGE_YEARS} years old")
        for field in ("first_name", "last_name", "phone", "bio", "location"):
            if isinstance(changes.get(field), str):
                changes[field] = changes[field].strip() or None

        with transaction(self.db):
            if user.profile is None:
                user.profile = Profile()
            for field, value in changes.items():
                setattr(user.profile, field, value)
            self.db.flush()

        self.db.refresh(user)
        self._logger.info(f"Profile of user {user.id} updated: {sorted(changes)}")
        return user

    def _set_profile_file(self, actor: Actor, field: str, url: str) -> Optional[str]:
        user = self._get_self(actor)
        with transaction(self.db):
            if user.profile is None:
                user.profile = Profile()
            previous = getattr(user.profile, field)
            setattr(user.profile, field, url)
        return previous

    def set_avatar_url(self, actor: Actor, url: str) -> Optional[str]:
        """Returns the replaced avatar URL, if any, for the storage service to delete."""
        return self._set_profile_file(actor, "avatar_url", url)

    def set_resume_url(self, actor: Actor, url: str) -> Optional[str]:
        """Returns the replaced resume URL, if any, for the storage service to delete."""
        return self._set_profile_file(actor, "resume_url", url)

    def get_user_skills(self, user_id: int) -> List[UserSkill]:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return list(user.user_skills)

    def add_skill(self, actor: Actor, data: UserSkillCreate) -> UserSkill:
        user = self._get_self(actor)
        if self.skills.get(data.skill_id) is None:
            raise NotFoundError("Skill not found")
        if self.users.get_user_skill(user.id, data.skill_id) is not None:
            raise ConflictError("User already has this skill")
        if data.years_of_exp is not None and not 0 <= data.years_of_exp <= MAX_YEARS_OF_EXPERIENCE:
            raise InvalidInputError(f"Years of experience must be between 0 and {MAX_YEARS_OF_EXPERIENCE}")

        with self.conflict_on_duplicate("User already has this skill"), transaction(self.db):
            user_skill = UserSkill(
                user_id=user.id,
                skill_id=data.skill_id,
                proficiency=data.proficiency,
                years_of_exp=data.years_of_exp,
            )
            self.db.add(user_skill)
            self.db.flush()

        self.db.refresh(user_skill)
        return user_skill

    def remove_skill(self, actor: Actor, skill_id: int) -> None:
        user_skill = self.users.get_user_skill(actor.id, skill_id)
        if user_skill is None:
            raise NotFoundError("User skill not found")
        with transaction(self.db):
            self.db.delete(user_skill)

    def delete_user(self, actor: Actor) -> List[str]:
        """
        Deactivate the actor's account and release its email address.

        The row is kept for the applications and jobs that reference it.
        Returns the stored file URLs (avatar, resume, company logo) the
        storage service should now remove.
        """
        user = self._get_self(actor)
        orphaned_files = []
        if user.profile is not None:
            orphaned_files.extend(u for u in (user.profile.avatar_url, user.profile.resume_url) if u)
        if user.company is not None and user.company.logo_url:
            orphaned_files.append(user.company.logo_url)

        with transaction(self.db):
            user.is_active = False
            user.deactivated_at = utcnow()
            user.email = tombstone_email()

        self._logger.info(f"User {user.id} deactivated")
        return orphaned_files

    def get_all_users_admin(
        self,
        actor: Actor,
        params: PageParams,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Page:
        require_role(actor, UserRole.ADMIN)
        clauses: List[Predicate] = []
        if role is not None:
            clauses.append(Equals("role", role))
        if is_active is not None:
            clauses.append(Equals("is_active", is_active))
        term = (search or "").strip()
        if term:
            clauses.append(
                any_of(
                    Contains("email", term),
                    Contains("profile.first_name", term),
                    Contains("profile.last_name", term),
                )
            )
        return self.users.find_page(all_of(*clauses), NEWEST_FIRST, params)

    def update_user_status(self, actor: Actor, user_id: int, is_active: bool) -> User:
        require_role(actor, UserRole.ADMIN)
        if user_id == actor.id and not is_active:
            raise InvalidInputError("Administrators cannot deactivate their own account")
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if is_active and user.email.endswith(f"@{TOMBSTONE_DOMAIN}"):
            raise InvalidInputError("Deleted accounts cannot be reactivated")

        with transaction(self.db):
            user.is_active = is_active
            user.deactivated_at = None if is_active else (user.deactivated_at or utcnow())

        self.db.refresh(user)
        self._logger.info(f"User {user.id} {'activated' if is_active else 'deactivated'} by admin {actor.id}")
        return user
