"""
Reporting period service.

Owner-scoped CRUD for reporting periods. Rolling category sums over into
a new period is not implemented.
"""

import logging
from datetime import date
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finance_backend.app.core.exceptions import InvalidDataError, ResourceNotFoundError
from finance_backend.app.core.guards import ownership_guard
from finance_backend.app.db.session import unit_of_work
from finance_backend.app.models.reporting_period import ReportingPeriod

logger = logging.getLogger("finance.reporting_periods")


def _check_end_date(end_date: date):
    if end_date < date.today():
        raise InvalidDataError(
            "Reporting period end date must be in the present or the future!",
            reason="end_date in the past"
        )


async def get_reporting_period(db: AsyncSession, period_id: int, owner_id: int) -> ReportingPeriod:
    period = await db.get(ReportingPeriod, period_id, populate_existing=True)
    if not period:
        raise ResourceNotFoundError("Reporting period", period_id)
    ownership_guard.enforce(period.user_id, owner_id, "Reporting period")
    return period


async def list_reporting_periods(db: AsyncSession, owner_id: int) -> List[ReportingPeriod]:
    result = await db.execute(
        select(ReportingPeriod)
        .where(ReportingPeriod.user_id == owner_id)
        .order_by(ReportingPeriod.end_date.desc(), ReportingPeriod.id.desc())
    )
    return list(result.scalars().all())


async def create_reporting_period(db: AsyncSession, owner_id: int, end_date: date, end_sum) -> ReportingPeriod:
    _check_end_date(end_date)
    async with unit_of_work(db):
        period = ReportingPeriod(user_id=owner_id, end_date=end_date, end_sum=end_sum)
        db.add(period)
        await db.flush()

    await db.refresh(period)
    logger.info("Reporting period %s created for owner %s", period.id, owner_id)
    return period


async def update_reporting_period(db: AsyncSession, period_id: int, owner_id: int, changes: dict) -> ReportingPeriod:
    async with unit_of_work(db):
        period = await get_reporting_period(db, period_id, owner_id)
        if changes.get("end_date") is not None:
            _check_end_date(changes["end_date"])
            period.end_date = changes["end_date"]
        if changes.get("end_sum") is not None:
            period.end_sum = changes["end_sum"]

    await db.refresh(period)
    return period


async def delete_reporting_period(db: AsyncSession, period_id: int, owner_id: int) -> ReportingPeriod:
    async with unit_of_work(db):
        period = await get_reporting_period(db, period_id, owner_id)
        await db.delete(period)

    logger.info("Reporting period %s deleted", period_id)
    return period
