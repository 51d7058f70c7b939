"""
Account Pydantic schemas.

Defines request and response models for account management.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from finance_backend.app.models.enums import AccountStatus


class AccountCreate(BaseModel):
    """Schema for creating a new account."""
    name: str = Field(..., min_length=1, max_length=200, description="Account name, unique per user")
    goal: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    initial_balance: Decimal = Field(Decimal("0"), max_digits=14, decimal_places=2, description="Booked as a balance sync")


class AccountUpdate(BaseModel):
    """Schema for updating an existing account."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    goal: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)


class AccountGoalUpdate(BaseModel):
    goal: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)


class BalanceSyncRequest(BaseModel):
    """Externally observed balance the account should be reconciled to."""
    balance: Decimal = Field(..., max_digits=14, decimal_places=2)


class AccountResponse(BaseModel):
    """Schema for account response."""
    id: int
    owner_id: int
    name: str
    balance: Decimal
    goal: Optional[Decimal]
    status: AccountStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AccountListResponse(BaseModel):
    accounts: List[AccountResponse]
    total: int


class AccountTotalResponse(BaseModel):
    """Sum of balances of all activated accounts."""
    total_balance: Decimal


class AccountPeriodSumResponse(BaseModel):
    account_id: int
    start_date: date
    end_date: date
    sum: Decimal
