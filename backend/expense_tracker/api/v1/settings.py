# expense_tracker/api/v1/settings.py
"""User preferences plus account-level data operations (export, stats, wipe)."""
import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from expense_tracker.api.v1.deps import get_current_user
from expense_tracker.db import crud, models
from expense_tracker.db.session import get_db
from expense_tracker.schemas.settings import (
    AccountStatistics,
    DataExport,
    DeletedData,
    SettingsOut,
    SettingsUpdate,
)
from expense_tracker.services.defaults import DEFAULT_SETTINGS

logger = logging.getLogger(__name__)
router = APIRouter(tags=["settings"])


def _current_settings(db: Session, user: models.User):
    stored = crud.get_user_settings(db, user.id)
    return stored if stored is not None else dict(DEFAULT_SETTINGS)


@router.get("", response_model=SettingsOut)
def get_settings(current_user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _current_settings(db, current_user)


@router.put("", response_model=SettingsOut)
def update_settings(
    payload: SettingsUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    prefs = crud.get_user_settings(db, current_user.id)
    if prefs is None:
        prefs = models.UserSettings(user_id=current_user.id, **DEFAULT_SETTINGS)
    prefs = crud.save(db, prefs, payload.model_dump(exclude_unset=True, exclude_none=True))
    logger.info("user %s updated settings", current_user.id)
    return prefs


@router.get("/export", response_model=DataExport)
def export_data(current_user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {
        "expenses": crud.list_expenses(db, current_user.id),
        "categories": crud.list_categories(db, current_user.id),
        "budgets": crud.list_budgets(db, current_user.id),
        "settings": _current_settings(db, current_user),
        "exported_at": datetime.now(timezone.utc),
    }


@router.get("/statistics", response_model=AccountStatistics)
def account_statistics(current_user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    counts = crud.count_user_rows(db, current_user.id)
    first = crud.first_expense_date(db, current_user.id)
    age_days = (date.today() - first).days if first else 0
    return {**counts, "account_age_days": max(age_days, 0)}


@router.delete("/data", response_model=DeletedData)
def delete_all_data(current_user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Remove every expense, budget and category of the user. Settings are kept."""
    deleted = crud.delete_user_data(db, current_user.id)
    logger.warning("user %s deleted all data: %s", current_user.id, deleted)
    return {"deleted": deleted}
