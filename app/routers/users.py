from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.pagination import PageParams
from app.core.schemas import serialize
from app.core.security import Actor
from app.database import get_db
from app.models.user import UserRole
from app.routers.auth_deps import get_current_actor, get_optional_actor
from app.routers.params import ok, ok_item, ok_page, page_params
from app.schemas.user import (
    AdminUserOut,
    FileUrlUpdate,
    ProfileUpdate,
    UserDetailOut,
    UserOut,
    UserRegister,
    UserSkillCreate,
    UserSkillOut,
    UserStatusUpdate,
)
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(user_in: UserRegister, db: Session = Depends(get_db)):
    user = UserService(db).register_user(user_in)
    return ok_item(UserOut, user, "User registered successfully")


@router.get("")
def list_users(params: PageParams = Depends(page_params), db: Session = Depends(get_db)):
    page = UserService(db).get_all_users(params)
    return ok_page(UserOut, page, "Users retrieved successfully")


@router.get("/admin/all")
def list_users_admin(
    params: PageParams = Depends(page_params),
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    search: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    page = UserService(db).get_all_users_admin(actor, params, role=role, is_active=is_active, search=search)
    return ok_page(AdminUserOut, page, "Users retrieved successfully")


@router.get("/me")
def me(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    user = UserService(db).get_user_by_id(actor.id, actor)
    return ok_item(UserDetailOut, user, "User retrieved successfully")


@router.put("/me/profile")
def update_profile(
    profile_in: ProfileUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    user = UserService(db).update_profile(actor, profile_in)
    return ok_item(UserDetailOut, user, "Profile updated successfully")


@router.put("/me/avatar")
def set_avatar(
    file_in: FileUrlUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    previous = UserService(db).set_avatar_url(actor, file_in.url)
    return ok({"avatarUrl": file_in.url, "previousAvatarUrl": previous}, "Avatar updated successfully")


@router.put("/me/resume")
def set_resume(
    file_in: FileUrlUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    previous = UserService(db).set_resume_url(actor, file_in.url)
    return ok({"resumeUrl": file_in.url, "previousResumeUrl": previous}, "Resume updated successfully")


@router.post("/me/skills", status_code=status.HTTP_201_CREATED)
def add_skill(
    skill_in: UserSkillCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    user_skill = UserService(db).add_skill(actor, skill_in)
    return ok_item(UserSkillOut, user_skill, "Skill added successfully")


@router.delete("/me/skills/{skill_id}")
def remove_skill(
    skill_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    UserService(db).remove_skill(actor, skill_id)
    return ok(None, "Skill removed successfully")


@router.delete("/me")
def delete_account(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    orphaned_files = UserService(db).delete_user(actor)
    return ok({"filesToDelete": orphaned_files}, "Account deleted successfully")


@router.get("/{user_id}")
def get_user(
    user_id: int,
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db),
):
    user = UserService(db).get_user_by_id(user_id, actor)
    return ok_item(UserDetailOut, user, "User retrieved successfully")


@router.get("/{user_id}/skills")
def user_skills(user_id: int, db: Session = Depends(get_db)):
    skills = UserService(db).get_user_skills(user_id)
    return ok(serialize(UserSkillOut, skills), "Skills retrieved successfully")


@router.patch("/{user_id}/status")
def update_user_status(
    user_id: int,
    status_in: UserStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    user = UserService(db).update_user_status(actor, user_id, status_in.is_active)
    return ok_item(AdminUserOut, user, "User status updated successfully")
