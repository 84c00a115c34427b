# expense_tracker/schemas/settings.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from expense_tracker.schemas.budget import BudgetOut
from expense_tracker.schemas.category import CategoryOut
from expense_tracker.schemas.currency import CurrencyCode
from expense_tracker.schemas.expense import ExpenseOut


class SettingsBase(BaseModel):
    currency: CurrencyCode = "USD"
    language: str = Field("English", max_length=50)
    theme: str = Field("#10b981", max_length=50)
    auto_save: bool = True
    email_notifications: bool = True
    budget_alerts: bool = True
    weekly_summary: bool = True
    dark_mode: bool = False


class SettingsUpdate(BaseModel):
    currency: Optional[CurrencyCode] = None
    language: Optional[str] = Field(None, max_length=50)
    theme: Optional[str] = Field(None, max_length=50)
    auto_save: Optional[bool] = None
    email_notifications: Optional[bool] = None
    budget_alerts: Optional[bool] = None
    weekly_summary: Optional[bool] = None
    dark_mode: Optional[bool] = None


class SettingsOut(SettingsBase):
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DataExport(BaseModel):
    expenses: List[ExpenseOut]
    categories: List[CategoryOut]
    budgets: List[BudgetOut]
    settings: SettingsOut
    exported_at: datetime


class AccountStatistics(BaseModel):
    expense_count: int
    category_count: int
    budget_count: int
    account_age_days: int


class DeletedData(BaseModel):
    deleted: Dict[str, Any]
