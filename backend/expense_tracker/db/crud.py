# expense_tracker/db/crud.py
"""Data-access functions used by the routers.

Every function here is individually wrapped with the transient-error retry
(see ``db/retry.py``); a failed attempt rolls the session back before the next
one so the retry starts from a clean transaction.

The rollback expires loaded rows and drops unflushed attribute changes, so
writes pass their changes in (``save(db, obj, changes)``) and each attempt
applies them again.
"""
import functools
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from expense_tracker.db import models
from expense_tracker.db.retry import retry_on_transient


def db_call(fn):
    @functools.wraps(fn)
    def guarded(db: Session, *args, **kwargs):
        try:
            return fn(db, *args, **kwargs)
        except Exception:
            db.rollback()
            raise

    return retry_on_transient()(guarded)


# -- generic ---------------------------------------------------------------

@db_call
def save(db: Session, obj, changes: Optional[Dict[str, Any]] = None):
    for field, value in (changes or {}).items():
        setattr(obj, field, value)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@db_call
def save_all(db: Session, objs: List[Any]) -> List[Any]:
    db.add_all(objs)
    db.commit()
    for obj in objs:
        db.refresh(obj)
    return objs


@db_call
def delete(db: Session, obj) -> None:
    db.delete(obj)
    db.commit()


# -- users -----------------------------------------------------------------

@db_call
def get_user_by_external_id(db: Session, external_id: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.external_id == external_id).first()


# -- categories ------------------------------------------------------------

@db_call
def list_categories(db: Session, user_id: int) -> List[models.Category]:
    return (
        db.query(models.Category)
        .filter(models.Category.user_id == user_id)
        .order_by(models.Category.name.asc())
        .all()
    )


@db_call
def get_category(db: Session, user_id: int, category_id: int) -> Optional[models.Category]:
    return (
        db.query(models.Category)
        .filter(models.Category.id == category_id, models.Category.user_id == user_id)
        .first()
    )


@db_call
def get_category_by_name(db: Session, user_id: int, name: str) -> Optional[models.Category]:
    return (
        db.query(models.Category)
        .filter(models.Category.user_id == user_id, func.lower(models.Category.name) == name.strip().lower())
        .first()
    )


@db_call
def count_category_expenses(db: Session, category_id: int) -> int:
    return db.query(models.Expense).filter(models.Expense.category_id == category_id).count()


# -- expenses --------------------------------------------------------------

def _expense_query(
    db: Session,
    user_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category_id: Optional[int] = None,
):
    q = (
        db.query(models.Expense)
        .options(joinedload(models.Expense.category))
        .filter(models.Expense.user_id == user_id)
    )
    if start_date:
        q = q.filter(models.Expense.date >= start_date)
    if end_date:
        q = q.filter(models.Expense.date <= end_date)
    if category_id is not None:
        q = q.filter(models.Expense.category_id == category_id)
    return q


@db_call
def page_expenses(
    db: Session,
    user_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category_id: Optional[int] = None,
    page: int = 1,
    per_page: int = 25,
) -> Tuple[int, List[models.Expense]]:
    q = _expense_query(db, user_id, start_date, end_date, category_id)
    total = q.count()
    items = (
        q.order_by(models.Expense.date.desc(), models.Expense.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return total, items


@db_call
def list_expenses(
    db: Session,
    user_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category_id: Optional[int] = None,
) -> List[models.Expense]:
    q = _expense_query(db, user_id, start_date, end_date, category_id)
    return q.order_by(models.Expense.date.asc(), models.Expense.id.asc()).all()


@db_call
def get_expense(db: Session, user_id: int, expense_id: int) -> Optional[models.Expense]:
    return (
        _expense_query(db, user_id)
        .filter(models.Expense.id == expense_id)
        .first()
    )


@db_call
def first_expense_date(db: Session, user_id: int) -> Optional[date]:
    return (
        db.query(func.min(models.Expense.date))
        .filter(models.Expense.user_id == user_id)
        .scalar()
    )


# -- budgets ---------------------------------------------------------------

@db_call
def list_budgets(db: Session, user_id: int) -> List[models.Budget]:
    return (
        db.query(models.Budget)
        .options(joinedload(models.Budget.category))
        .filter(models.Budget.user_id == user_id)
        .order_by(models.Budget.start_date.desc(), models.Budget.id.desc())
        .all()
    )


@db_call
def get_budget(db: Session, user_id: int, budget_id: int) -> Optional[models.Budget]:
    return (
        db.query(models.Budget)
        .filter(models.Budget.id == budget_id, models.Budget.user_id == user_id)
        .first()
    )


# -- settings & account data -----------------------------------------------

@db_call
def get_user_settings(db: Session, user_id: int) -> Optional[models.UserSettings]:
    return db.query(models.UserSettings).filter(models.UserSettings.user_id == user_id).first()


@db_call
def count_user_rows(db: Session, user_id: int) -> Dict[str, int]:
    return {
        "expense_count": db.query(models.Expense).filter(models.Expense.user_id == user_id).count(),
        "category_count": db.query(models.Category).filter(models.Category.user_id == user_id).count(),
        "budget_count": db.query(models.Budget).filter(models.Budget.user_id == user_id).count(),
    }


@db_call
def delete_user_data(db: Session, user_id: int) -> Dict[str, int]:
    """Delete expenses, budgets and categories of a user in one transaction."""
    deleted: Dict[str, int] = {}
    # children first so foreign keys stay valid
    for key, model in (
        ("expenses", models.Expense),
        ("budgets", models.Budget),
        ("categories", models.Category),
    ):
        deleted[key] = (
            db.query(model)
            .filter(model.user_id == user_id)
            .delete(synchronize_session=False)
        )
    db.commit()
    return deleted
