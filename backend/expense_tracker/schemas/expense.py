# expense_tracker/schemas/expense.py
import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from expense_tracker.schemas.category import CategoryRef
from expense_tracker.schemas.currency import CurrencyCode


class ExpenseBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    currency: CurrencyCode = "USD"
    date: datetime.date
    description: Optional[str] = None
    category_id: Optional[int] = None
    receipt_url: Optional[str] = Field(None, max_length=1024)


class ExpenseCreate(ExpenseBase):
    pass


class ExpenseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    currency: Optional[CurrencyCode] = None
    date: Optional[datetime.date] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    receipt_url: Optional[str] = Field(None, max_length=1024)


class ExpenseOut(BaseModel):
    id: int
    user_id: int
    title: str
    amount: float
    currency: str
    date: datetime.date
    description: Optional[str] = None
    category_id: Optional[int] = None
    category: Optional[CategoryRef] = None
    receipt_url: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ExpensePage(BaseModel):
    total: int
    page: int
    per_page: int
    items: List[ExpenseOut]


class ReceiptExpenseData(BaseModel):
    """A receipt extraction as reviewed by the user; title and date may be cleared."""

    title: Optional[str] = Field(None, max_length=255)
    amount: float
    currency: CurrencyCode = "USD"
    date: Optional[datetime.date] = None
    category: Optional[str] = None
    vendor: Optional[str] = None
    description: Optional[str] = None
    receipt_url: Optional[str] = Field(None, max_length=1024)

    @field_validator("amount")
    @classmethod
    def _positive_cents(cls, v: float) -> float:
        # rounded to cents before the positivity check
        v = round(v, 2)
        if v <= 0:
            raise ValueError("amount must be at least 0.01")
        return v


class ExpenseFromReceipt(BaseModel):
    data: ReceiptExpenseData
    file_path: Optional[str] = None
    category_id: Optional[int] = None
