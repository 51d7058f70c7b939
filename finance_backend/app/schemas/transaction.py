"""
Transaction Pydantic schemas.

Defines request and response models for ledger transactions.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from finance_backend.app.models.enums import EntityType, TransactionShape


class TransactionCreate(BaseModel):
    """Schema for creating a transaction."""
    date_of_completion: date
    from_type: EntityType
    from_id: int = Field(..., ge=1)
    to_type: EntityType
    to_id: int = Field(..., ge=1)
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)
    recurring: Optional[str] = Field(None, max_length=50, description="Stored as-is, not scheduled")
    auto_execute: bool = False


class TransactionUpdate(TransactionCreate):
    """Full replacement of a transaction's values."""


class TransactionResponse(BaseModel):
    """Schema for transaction response."""
    id: int
    user_id: int
    date_of_completion: date
    from_type: EntityType
    from_id: int
    to_type: EntityType
    to_id: int
    amount: Decimal
    description: Optional[str]
    recurring: Optional[str]
    auto_execute: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TransactionListResponse(BaseModel):
    """Schema for paginated transaction list."""
    transactions: List[TransactionResponse]
    total: int
    page: int
    page_size: int


class TransactionTotalResponse(BaseModel):
    shape: TransactionShape
    start_date: Optional[date]
    end_date: Optional[date]
    total_sum: Decimal
