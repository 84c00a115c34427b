# expense_tracker/schemas/category.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

HEX_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    color: str = Field("#98C1D9", pattern=HEX_COLOR)
    icon: Optional[str] = Field(None, max_length=50)


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    icon: Optional[str] = Field(None, max_length=50)


class CategoryOut(CategoryBase):
    id: int
    user_id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CategoryRef(BaseModel):
    id: int
    name: str
    color: str

    model_config = ConfigDict(from_attributes=True)
