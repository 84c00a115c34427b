# expense_tracker/api/v1/budgets.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from expense_tracker.api.v1.deps import get_current_user
from expense_tracker.db import crud, models
from expense_tracker.db.session import get_db
from expense_tracker.schemas.budget import BudgetCreate, BudgetOut, BudgetStatus, BudgetUpdate
from expense_tracker.services.analytics import budget_status, month_bounds

router = APIRouter(tags=["budgets"])


def _get_owned_budget(db: Session, user_id: int, budget_id: int) -> models.Budget:
    budget = crud.get_budget(db, user_id, budget_id)
    if not budget:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")
    return budget


def _require_category(db: Session, user_id: int, category_id: Optional[int]) -> None:
    if category_id is not None and crud.get_category(db, user_id, category_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category not found")


@router.get("", response_model=List[BudgetOut])
def list_budgets(current_user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud.list_budgets(db, current_user.id)


@router.post("", response_model=BudgetOut, status_code=status.HTTP_201_CREATED)
def create_budget(payload: BudgetCreate, current_user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    _require_category(db, current_user.id, payload.category_id)
    data = payload.model_dump()
    data["period"] = payload.period.value
    return crud.save(db, models.Budget(user_id=current_user.id, **data))


@router.get("/status", response_model=List[BudgetStatus])
def budgets_status(current_user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Current-month spending per budget, converted into each budget's currency."""
    today = date.today()
    start, end = month_bounds(today)
    expenses = crud.list_expenses(db, current_user.id, start_date=start, end_date=end)
    return [budget_status(b, expenses, today=today) for b in crud.list_budgets(db, current_user.id)]


@router.get("/{budget_id}", response_model=BudgetOut)
def get_budget(budget_id: int, current_user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _get_owned_budget(db, current_user.id, budget_id)


@router.put("/{budget_id}", response_model=BudgetOut)
def update_budget(
    budget_id: int,
    payload: BudgetUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    budget = _get_owned_budget(db, current_user.id, budget_id)
    changes = payload.model_dump(exclude_unset=True)
    for field in ("amount", "currency", "period", "start_date", "end_date"):
        if field in changes and changes[field] is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} cannot be null")
    if "category_id" in changes:
        _require_category(db, current_user.id, changes["category_id"])
    if "period" in changes:
        changes["period"] = changes["period"].value

    start = changes.get("start_date", budget.start_date)
    end = changes.get("end_date", budget.end_date)
    if end < start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_date must not be before start_date")

    return crud.save(db, budget, changes)


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(budget_id: int, current_user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    budget = _get_owned_budget(db, current_user.id, budget_id)
    crud.delete(db, budget)
    return None
