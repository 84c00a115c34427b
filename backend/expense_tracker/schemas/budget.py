# expense_tracker/schemas/budget.py
import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from expense_tracker.schemas.category import CategoryRef
from expense_tracker.schemas.currency import CurrencyCode


class BudgetPeriod(str, Enum):
    weekly = "weekly"
    monthly = "monthly"
    quarterly = "quarterly"
    yearly = "yearly"
    custom = "custom"


class BudgetBase(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    currency: CurrencyCode = "USD"
    period: BudgetPeriod = BudgetPeriod.monthly
    start_date: datetime.date
    end_date: datetime.date
    category_id: Optional[int] = None
    description: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class BudgetCreate(BudgetBase):
    pass


class BudgetUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    currency: Optional[CurrencyCode] = None
    period: Optional[BudgetPeriod] = None
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None
    category_id: Optional[int] = None
    description: Optional[str] = None


class BudgetOut(BaseModel):
    id: int
    user_id: int
    amount: float
    currency: str
    period: str
    start_date: datetime.date
    end_date: datetime.date
    category_id: Optional[int] = None
    category: Optional[CategoryRef] = None
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class BudgetStatus(BaseModel):
    budget_id: int
    category_id: Optional[int] = None
    category: Optional[str] = None
    color: Optional[str] = None
    period: str
    currency: str
    amount: float
    spent: float
    remaining: float
    percentage: float
    is_over_budget: bool
