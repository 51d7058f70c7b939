"""
Account API Endpoints.

Manage the authenticated user's accounts. Balances change only through
transactions or the balance sync endpoint.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from finance_backend.app.core.dependencies import get_current_user_id
from finance_backend.app.db.session import get_db
from finance_backend.app.models.enums import AccountStatus
from finance_backend.app.schemas.account import (
    AccountCreate, AccountUpdate, AccountGoalUpdate, BalanceSyncRequest,
    AccountResponse, AccountListResponse, AccountTotalResponse, AccountPeriodSumResponse
)
from finance_backend.app.services import accounts as account_service
from finance_backend.app.services import transactions as transaction_service

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.get("", response_model=AccountListResponse)
async def list_accounts(
    account_status: Optional[AccountStatus] = Query(None, alias="status", description="Only accounts in this state"),
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """List non-deleted accounts, or all accounts in one state."""
    accounts = await account_service.list_accounts(db, owner_id, account_status)
    return AccountListResponse(
        accounts=[AccountResponse.model_validate(account) for account in accounts],
        total=len(accounts)
    )


@router.get("/total-balance", response_model=AccountTotalResponse)
async def total_balance(
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Sum of balances of all activated accounts."""
    total = await account_service.total_activated_balance(db, owner_id)
    return AccountTotalResponse(total_balance=total)


@router.post("/examples", response_model=AccountListResponse, status_code=status.HTTP_201_CREATED)
async def create_example_accounts(
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    accounts = await account_service.create_example_accounts(db, owner_id)
    return AccountListResponse(
        accounts=[AccountResponse.model_validate(account) for account in accounts],
        total=len(accounts)
    )


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    account_data: AccountCreate,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new account for the authenticated user.

    A non-zero initial balance is booked as a balance sync transaction.
    """
    account = await account_service.create_account(
        db, owner_id, account_data.name, account_data.goal, account_data.initial_balance
    )
    return AccountResponse.model_validate(account)


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: int,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    account = await account_service.get_account(db, account_id, owner_id)
    return AccountResponse.model_validate(account)


@router.get("/{account_id}/income-sum", response_model=AccountPeriodSumResponse)
async def account_income_sum(
    account_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Income and incoming transfers between two dates (inclusive)."""
    total = await account_service.account_income_sum(db, account_id, owner_id, start_date, end_date)
    return AccountPeriodSumResponse(account_id=account_id, start_date=start_date, end_date=end_date, sum=total)


@router.get("/{account_id}/expense-sum", response_model=AccountPeriodSumResponse)
async def account_expense_sum(
    account_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Expenses and outgoing transfers between two dates (inclusive)."""
    total = await account_service.account_expense_sum(db, account_id, owner_id, start_date, end_date)
    return AccountPeriodSumResponse(account_id=account_id, start_date=start_date, end_date=end_date, sum=total)


@router.patch("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: int,
    account_data: AccountUpdate,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Rename an account or change its goal."""
    account = await account_service.update_account(
        db, account_id, owner_id, account_data.model_dump(exclude_unset=True)
    )
    return AccountResponse.model_validate(account)


@router.patch("/{account_id}/goal", response_model=AccountResponse)
async def set_account_goal(
    account_id: int,
    goal_data: AccountGoalUpdate,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    account = await account_service.set_account_goal(db, account_id, owner_id, goal_data.goal)
    return AccountResponse.model_validate(account)


@router.patch("/{account_id}/balance", response_model=AccountResponse)
async def sync_account_balance(
    account_id: int,
    sync_data: BalanceSyncRequest,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Reconcile the account with an externally observed balance.

    The difference is booked as an income from SYS_INCOME or an expense to
    SYS_EXPENSES dated today.
    """
    account = await transaction_service.apply_balance_sync(db, account_id, owner_id, sync_data.balance)
    return AccountResponse.model_validate(account)


@router.patch("/{account_id}/activate", response_model=AccountResponse)
async def activate_account(
    account_id: int,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    account = await account_service.activate_account(db, account_id, owner_id)
    return AccountResponse.model_validate(account)


@router.patch("/{account_id}/deactivate", response_model=AccountResponse)
async def deactivate_account(
    account_id: int,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    account = await account_service.deactivate_account(db, account_id, owner_id)
    return AccountResponse.model_validate(account)


@router.delete("/{account_id}", response_model=AccountResponse)
async def delete_account(
    account_id: int,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Soft-delete an account. Its balance must be zero."""
    account = await account_service.delete_account(db, account_id, owner_id)
    return AccountResponse.model_validate(account)
