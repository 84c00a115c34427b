# expense_tracker/api/v1/expenses.py
import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from expense_tracker.api.v1.deps import get_current_user
from expense_tracker.db import crud, models
from expense_tracker.db.session import get_db
from expense_tracker.schemas.expense import (
    ExpenseCreate,
    ExpenseFromReceipt,
    ExpenseOut,
    ExpensePage,
    ExpenseUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["expenses"])

RECEIPT_EXPENSE_TITLE = "Receipt Expense"


def _require_category(db: Session, user_id: int, category_id: Optional[int]) -> None:
    if category_id is not None and crud.get_category(db, user_id, category_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category not found")


def _get_owned_expense(db: Session, user_id: int, expense_id: int) -> models.Expense:
    expense = crud.get_expense(db, user_id, expense_id)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return expense


@router.get("", response_model=ExpensePage)
def list_expenses(
    start_date: Optional[date] = Query(None, description="YYYY-MM-DD"),
    end_date: Optional[date] = Query(None, description="YYYY-MM-DD"),
    category_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(25, ge=1, le=200),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Paginated list of the current user's expenses, newest first, with optional
    date range and category filter.
    """
    if start_date and end_date and end_date < start_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_date must not be before start_date")
    total, items = crud.page_expenses(
        db, current_user.id, start_date, end_date, category_id, page=page, per_page=per_page
    )
    return {"total": total, "page": page, "per_page": per_page, "items": items}


@router.post("", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: ExpenseCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _require_category(db, current_user.id, payload.category_id)
    expense = crud.save(db, models.Expense(user_id=current_user.id, **payload.model_dump()))
    logger.info("user %s created expense %s", current_user.id, expense.id)
    return expense


@router.post("/from-receipt", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
def create_expense_from_receipt(
    payload: ExpenseFromReceipt,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Save a reviewed receipt extraction as an expense."""
    record = payload.data

    category_id = payload.category_id
    if category_id is None and record.category:
        match = crud.get_category_by_name(db, current_user.id, record.category)
        category_id = match.id if match else None
    _require_category(db, current_user.id, category_id)

    description = record.description
    if record.vendor and not description:
        description = f"Vendor: {record.vendor}"

    expense = models.Expense(
        user_id=current_user.id,
        title=(record.title or "").strip() or RECEIPT_EXPENSE_TITLE,
        amount=Decimal(str(record.amount)),
        currency=record.currency,
        date=record.date or date.today(),
        description=description,
        category_id=category_id,
        receipt_url=payload.file_path or record.receipt_url,
    )
    expense = crud.save(db, expense)
    logger.info("user %s created expense %s from receipt %s", current_user.id, expense.id, expense.receipt_url)
    return expense


@router.get("/{expense_id}", response_model=ExpenseOut)
def get_expense(expense_id: int, current_user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _get_owned_expense(db, current_user.id, expense_id)


@router.put("/{expense_id}", response_model=ExpenseOut)
def update_expense(
    expense_id: int,
    payload: ExpenseUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    expense = _get_owned_expense(db, current_user.id, expense_id)
    changes = payload.model_dump(exclude_unset=True)
    for field in ("title", "amount", "currency", "date"):
        if field in changes and changes[field] is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} cannot be null")
    if "category_id" in changes:
        _require_category(db, current_user.id, changes["category_id"])

    return crud.save(db, expense, changes)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(expense_id: int, current_user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    expense = _get_owned_expense(db, current_user.id, expense_id)
    crud.delete(db, expense)
    return None
