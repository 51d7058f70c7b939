"""
Reporting Period API Endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from finance_backend.app.core.dependencies import get_current_user_id
from finance_backend.app.db.session import get_db
from finance_backend.app.schemas.reporting_period import (
    ReportingPeriodCreate, ReportingPeriodUpdate, ReportingPeriodResponse, ReportingPeriodListResponse
)
from finance_backend.app.services import reporting_periods as period_service

router = APIRouter(prefix="/reporting-periods", tags=["Reporting Periods"])


@router.get("", response_model=ReportingPeriodListResponse)
async def list_reporting_periods(
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    periods = await period_service.list_reporting_periods(db, owner_id)
    return ReportingPeriodListResponse(
        reporting_periods=[ReportingPeriodResponse.model_validate(period) for period in periods],
        total=len(periods)
    )


@router.post("", response_model=ReportingPeriodResponse, status_code=status.HTTP_201_CREATED)
async def create_reporting_period(
    period_data: ReportingPeriodCreate,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    period = await period_service.create_reporting_period(db, owner_id, period_data.end_date, period_data.end_sum)
    return ReportingPeriodResponse.model_validate(period)


@router.get("/{period_id}", response_model=ReportingPeriodResponse)
async def get_reporting_period(
    period_id: int,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    period = await period_service.get_reporting_period(db, period_id, owner_id)
    return ReportingPeriodResponse.model_validate(period)


@router.patch("/{period_id}", response_model=ReportingPeriodResponse)
async def update_reporting_period(
    period_id: int,
    period_data: ReportingPeriodUpdate,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    period = await period_service.update_reporting_period(
        db, period_id, owner_id, period_data.model_dump(exclude_unset=True)
    )
    return ReportingPeriodResponse.model_validate(period)


@router.delete("/{period_id}", response_model=ReportingPeriodResponse)
async def delete_reporting_period(
    period_id: int,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    period = await period_service.delete_reporting_period(db, period_id, owner_id)
    return ReportingPeriodResponse.model_validate(period)
