"""
Category Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from finance_backend.app.models.enums import CategoryType


class CategoryCreate(BaseModel):
    """Schema for creating a new category."""
    name: str = Field(..., min_length=1, max_length=200, description="Category name, unique per user")
    type: CategoryType
    limit: Optional[str] = Field(None, max_length=100)


class CategoryUpdate(BaseModel):
    """Name and limit are editable; the type is fixed at creation."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    limit: Optional[str] = Field(None, max_length=100)


class CategoryLimitUpdate(BaseModel):
    limit: Optional[str] = Field(None, max_length=100)


class CategoryResponse(BaseModel):
    """Schema for category response."""
    id: int
    owner_id: int
    name: str
    type: CategoryType
    current_period_sum: Decimal
    limit: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CategoryListResponse(BaseModel):
    categories: List[CategoryResponse]
    total: int


class CategoryTotalResponse(BaseModel):
    type: CategoryType
    total_sum: Decimal


class CategoryPeriodSumResponse(BaseModel):
    category_id: int
    start_date: date
    end_date: date
    sum: Decimal
