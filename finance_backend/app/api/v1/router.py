"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from finance_backend.app.api.v1.endpoints import accounts, categories, transactions, reporting_periods

router = APIRouter()

router.include_router(accounts.router)
router.include_router(categories.router)
router.include_router(transactions.router)
router.include_router(reporting_periods.router)
