# expense_tracker/api/v1/categories.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from expense_tracker.api.v1.deps import get_current_user
from expense_tracker.db import crud, models
from expense_tracker.db.session import get_db
from expense_tracker.schemas.category import CategoryCreate, CategoryOut, CategoryUpdate
from expense_tracker.services.defaults import DEFAULT_CATEGORIES

logger = logging.getLogger(__name__)
router = APIRouter(tags=["categories"])


def _get_owned_category(db: Session, user_id: int, category_id: int) -> models.Category:
    cat = crud.get_category(db, user_id, category_id)
    if not cat:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return cat


def _clean_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category name cannot be blank")
    return name


def _ensure_name_free(db: Session, user_id: int, name: str, exclude_id: int = None) -> None:
    existing = crud.get_category_by_name(db, user_id, name)
    if existing and existing.id != exclude_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category with this name already exists")


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    name = _clean_name(payload.name)
    _ensure_name_free(db, current_user.id, name)
    new = models.Category(user_id=current_user.id, name=name, color=payload.color, icon=payload.icon)
    return crud.save(db, new)


@router.get("", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return crud.list_categories(db, current_user.id)


@router.post("/initialize", response_model=List[CategoryOut])
def initialize_categories(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    """Seed the default categories for a user who has none; otherwise a no-op."""
    existing = crud.list_categories(db, current_user.id)
    if existing:
        return existing
    seeded = [models.Category(user_id=current_user.id, **c) for c in DEFAULT_CATEGORIES]
    crud.save_all(db, seeded)
    logger.info("seeded %d default categories for user %s", len(seeded), current_user.id)
    return crud.list_categories(db, current_user.id)


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return _get_owned_category(db, current_user.id, category_id)


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    cat = _get_owned_category(db, current_user.id, category_id)
    changes = {}
    if payload.name is not None:
        name = _clean_name(payload.name)
        _ensure_name_free(db, current_user.id, name, exclude_id=cat.id)
        changes["name"] = name
    if payload.color is not None:
        changes["color"] = payload.color
    if payload.icon is not None:
        changes["icon"] = payload.icon
    return crud.save(db, cat, changes)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    cat = _get_owned_category(db, current_user.id, category_id)
    in_use = crud.count_category_expenses(db, cat.id)
    if in_use:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Category is used by {in_use} expense(s); reassign them first",
        )
    crud.delete(db, cat)
    return None
