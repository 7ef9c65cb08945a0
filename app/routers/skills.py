from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.pagination import PageParams
from app.core.schemas import serialize
from app.core.security import Actor
from app.database import get_db
from app.routers.auth_deps import get_current_actor
from app.routers.params import ok, ok_item, ok_page, page_params
from app.schemas.skill import PopularSkillOut, SkillBulkCreate, SkillCreate, SkillOut, SkillUpdate
from app.services.skill_service import SkillService

router = APIRouter(prefix="/skills", tags=["Skills"])


@router.get("")
def list_skills(
    params: PageParams = Depends(page_params),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    page = SkillService(db).get_all_skills(params, category=category, search=search)
    return ok_page(SkillOut, page, "Skills retrieved successfully")


@router.get("/search")
def search_skills(q: Optional[str] = Query(None), db: Session = Depends(get_db)):
    skills = SkillService(db).search_skills(q)
    return ok(serialize(SkillOut, skills), "Skills retrieved successfully")


@router.get("/popular")
def popular_skills(limit: int = Query(10, ge=1, le=50), db: Session = Depends(get_db)):
    ranked = SkillService(db).get_popular_skills(limit)
    data = [
        {**serialize(SkillOut, skill), "jobCount": jobs, "userCount": users}
        for skill, jobs, users in ranked
    ]
    return ok(serialize(PopularSkillOut, data), "Popular skills retrieved successfully")


@router.get("/categories")
def skill_categories(db: Session = Depends(get_db)):
    return ok(SkillService(db).get_skill_categories(), "Skill categories retrieved successfully")


@router.get("/category/{category}")
def skills_by_category(category: str, db: Session = Depends(get_db)):
    skills = SkillService(db).get_skills_by_category(category)
    return ok(serialize(SkillOut, skills), "Skills retrieved successfully")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_skill(
    skill_in: SkillCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    skill = SkillService(db).create_skill(actor, skill_in)
    return ok_item(SkillOut, skill, "Skill created successfully")


@router.post("/bulk", status_code=status.HTTP_201_CREATED)
def bulk_create_skills(
    skills_in: SkillBulkCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    skills = SkillService(db).bulk_create_skills(actor, skills_in)
    return ok(serialize(SkillOut, skills), f"{len(skills)} skills created successfully")


@router.get("/{skill_id}")
def get_skill(skill_id: int, db: Session = Depends(get_db)):
    skill = SkillService(db).get_skill_by_id(skill_id)
    return ok_item(SkillOut, skill, "Skill retrieved successfully")


@router.put("/{skill_id}")
def update_skill(
    skill_id: int,
    skill_in: SkillUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    skill = SkillService(db).update_skill(skill_id, actor, skill_in)
    return ok_item(SkillOut, skill, "Skill updated successfully")


@router.delete("/{skill_id}")
def delete_skill(
    skill_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    SkillService(db).delete_skill(skill_id, actor)
    return ok(None, "Skill deleted successfully")
