from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.pagination import PageParams
from app.core.schemas import serialize
from app.core.security import Actor
from app.database import get_db
from app.routers.auth_deps import get_current_actor
from app.routers.params import ok, ok_item, ok_page, page_params
from app.schemas.category import CategoryCreate, CategoryOut, CategoryUpdate
from app.schemas.job import JobOut
from app.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("")
def list_categories(db: Session = Depends(get_db)):
    categories = CategoryService(db).get_all_categories()
    return ok(serialize(CategoryOut, categories), "Categories retrieved successfully")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(
    category_in: CategoryCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    category = CategoryService(db).create_category(actor, category_in)
    return ok_item(CategoryOut, category, "Category created successfully")


@router.get("/{category_id}")
def get_category(category_id: int, db: Session = Depends(get_db)):
    category = CategoryService(db).get_category_by_id(category_id)
    return ok_item(CategoryOut, category, "Category retrieved successfully")


@router.get("/{category_id}/jobs")
def category_jobs(
    category_id: int,
    params: PageParams = Depends(page_params),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: Session = Depends(get_db),
):
    page = CategoryService(db).get_category_jobs(category_id, params, sort_by, sort_order)
    return ok_page(JobOut, page, "Jobs retrieved successfully")


@router.put("/{category_id}")
def update_category(
    category_id: int,
    category_in: CategoryUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    category = CategoryService(db).update_category(category_id, actor, category_in)
    return ok_item(CategoryOut, category, "Category updated successfully")


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    CategoryService(db).delete_category(category_id, actor)
    return ok(None, "Category deleted successfully")
