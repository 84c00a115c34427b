# expense_tracker/schemas/receipt.py
import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class UntrustedReceipt(BaseModel):
    """Whatever the model sent back; every field optional and loosely typed."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: Any = None
    amount: Any = None
    currency: Any = None
    date: Any = None
    category: Any = None
    suggested_category: Any = Field(None, alias="suggestedCategory")
    vendor: Any = None
    description: Any = None


class ReceiptRecord(BaseModel):
    title: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    currency: str = "USD"
    date: Optional[datetime.date] = None
    category: Optional[str] = None
    suggested_category: Optional[str] = None
    vendor: Optional[str] = None
    description: Optional[str] = None
    receipt_url: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class ReceiptExtraction(BaseModel):
    data: ReceiptRecord
    file_path: str
    category_id: Optional[int] = None
