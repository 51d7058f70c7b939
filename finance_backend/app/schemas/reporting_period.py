"""
Reporting period Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List


class ReportingPeriodCreate(BaseModel):
    end_date: date
    end_sum: Decimal = Field(..., max_digits=14, decimal_places=2)


class ReportingPeriodUpdate(BaseModel):
    end_date: Optional[date] = None
    end_sum: Optional[Decimal] = Field(None, max_digits=14, decimal_places=2)


class ReportingPeriodResponse(BaseModel):
    id: int
    user_id: int
    end_date: date
    end_sum: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class ReportingPeriodListResponse(BaseModel):
    reporting_periods: List[ReportingPeriodResponse]
    total: int
