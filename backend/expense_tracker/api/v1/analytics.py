# expense_tracker/api/v1/analytics.py
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from expense_tracker.api.v1.deps import get_current_user
from expense_tracker.db import crud, models
from expense_tracker.db.session import get_db
from expense_tracker.schemas.currency import CurrencyCode
from expense_tracker.services import analytics
from expense_tracker.services.currency import BASE_CURRENCY

router = APIRouter(tags=["analytics"])


def preferred_currency(db: Session, user: models.User, requested: Optional[str]) -> str:
    """Query parameter first, then the user's saved preference, then USD."""
    if requested:
        return requested
    prefs = crud.get_user_settings(db, user.id)
    if prefs is not None and prefs.currency:
        return prefs.currency
    return BASE_CURRENCY


def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")


@router.get("/by_category", response_model=List[Dict[str, Any]])
def expenses_by_category(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    currency: Optional[CurrencyCode] = Query(None),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _check_range(start_date, end_date)
    target = preferred_currency(db, current_user, currency)
    expenses = crud.list_expenses(db, current_user.id, start_date, end_date)
    return analytics.totals_by_category(expenses, target)


@router.get("/by_date", response_model=List[Dict[str, Any]])
def expenses_by_date(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    currency: Optional[CurrencyCode] = Query(None),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _check_range(start_date, end_date)
    target = preferred_currency(db, current_user, currency)
    expenses = crud.list_expenses(db, current_user.id, start_date, end_date)
    return analytics.totals_by_date(expenses, target)


@router.get("/monthly", response_model=List[Dict[str, Any]])
def monthly_totals(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    currency: Optional[CurrencyCode] = Query(None),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    year = year or date.today().year
    target = preferred_currency(db, current_user, currency)
    expenses = crud.list_expenses(db, current_user.id, date(year, 1, 1), date(year, 12, 31))
    return analytics.monthly_totals(expenses, year, target)
