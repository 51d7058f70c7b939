"""
Account Store.

Owner-scoped account management. Balances are never assigned directly:
the ledger changes them through `apply_balance_delta`, and user supplied
balances are reconciled through a balance sync transaction.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from finance_backend.app.core.exceptions import NameConflictError, ResourceNotFoundError, StateConflictError
from finance_backend.app.core.guards import ownership_guard
from finance_backend.app.db.session import unit_of_work
from finance_backend.app.models.account import Account
from finance_backend.app.models.enums import AccountStatus, EntityType
from finance_backend.app.models.transaction import Transaction

logger = logging.getLogger("finance.accounts")

EXAMPLE_ACCOUNT_NAMES = ("Savings", "Cash", "Bank account")


async def apply_balance_delta(db: AsyncSession, account_id: int, delta: Decimal):
    """
    Add `delta` (possibly negative) to an account balance.

    Runs as a single UPDATE so concurrent deltas cannot overwrite each
    other. No floor is enforced here. Callers re-read the row to see the
    new value.
    """
    result = await db.execute(
        update(Account)
        .where(Account.id == account_id)
        .values(balance=Account.balance + delta)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise ResourceNotFoundError("Account", account_id)


async def _load_account(db: AsyncSession, account_id: int) -> Optional[Account]:
    result = await db.execute(
        select(Account)
        .where(Account.id == account_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_owned_account(db: AsyncSession, account_id: int, owner_id: int) -> Account:
    """Account by id, NotFound if missing, Forbidden if owned by someone else."""
    account = await _load_account(db, account_id)
    if not account:
        raise ResourceNotFoundError("Account", account_id)
    ownership_guard.enforce(account.owner_id, owner_id, "Account")
    return account


async def _name_taken(db: AsyncSession, owner_id: int, name: str) -> bool:
    result = await db.execute(
        select(func.count(Account.id)).where(
            Account.owner_id == owner_id,
            Account.name == name,
            Account.status != AccountStatus.DELETED
        )
    )
    return result.scalar() > 0


async def get_account(db: AsyncSession, account_id: int, owner_id: int) -> Account:
    return await get_owned_account(db, account_id, owner_id)


async def list_accounts(db: AsyncSession, owner_id: int, status: Optional[AccountStatus] = None) -> List[Account]:
    """All non-deleted accounts, or every account in `status` when given."""
    query = select(Account).where(Account.owner_id == owner_id)
    if status is None:
        query = query.where(Account.status != AccountStatus.DELETED)
    else:
        query = query.where(Account.status == status)

    result = await db.execute(query.order_by(Account.id).execution_options(populate_existing=True))
    return list(result.scalars().all())


async def total_activated_balance(db: AsyncSession, owner_id: int) -> Decimal:
    result = await db.execute(
        select(func.coalesce(func.sum(Account.balance), 0)).where(
            Account.owner_id == owner_id,
            Account.status == AccountStatus.ACTIVATED
        )
    )
    return Decimal(result.scalar())


async def _transaction_sum(db: AsyncSession, owner_id: int, start: date, end: date, condition) -> Decimal:
    result = await db.execute(
        select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.user_id == owner_id,
            Transaction.date_of_completion.between(start, end),
            condition
        )
    )
    return Decimal(result.scalar())


async def account_income_sum(db: AsyncSession, account_id: int, owner_id: int, start: date, end: date) -> Decimal:
    """
    Money that came into the account between two dates (inclusive).

    Counts income transactions into the account and transfers into it.
    """
    await get_owned_account(db, account_id, owner_id)
    # Income (CATEGORY -> ACCOUNT) and transfers in (ACCOUNT -> ACCOUNT) share the destination
    return await _transaction_sum(
        db, owner_id, start, end,
        and_(Transaction.to_type == EntityType.ACCOUNT, Transaction.to_id == account_id)
    )


async def account_expense_sum(db: AsyncSession, account_id: int, owner_id: int, start: date, end: date) -> Decimal:
    """
    Money that left the account between two dates (inclusive).

    Counts expense transactions from the account and transfers out of it.
    """
    await get_owned_account(db, account_id, owner_id)
    # Expenses (ACCOUNT -> CATEGORY) and transfers out (ACCOUNT -> ACCOUNT) share the source
    return await _transaction_sum(
        db, owner_id, start, end,
        and_(Transaction.from_type == EntityType.ACCOUNT, Transaction.from_id == account_id)
    )


async def create_account(
    db: AsyncSession,
    owner_id: int,
    name: str,
    goal: Optional[Decimal] = None,
    initial_balance: Decimal = Decimal("0"),
) -> Account:
    """
    Create an ACTIVATED account at balance zero.

    A non-zero `initial_balance` is booked as a balance sync in the same
    unit of work, so the account and its opening transaction appear
    together or not at all.
    """
    from finance_backend.app.services.transactions import book_balance_sync

    async with unit_of_work(db):
        if await _name_taken(db, owner_id, name):
            raise NameConflictError("Account", name)

        account = Account(
            owner_id=owner_id,
            name=name,
            goal=goal,
            balance=Decimal("0"),
            status=AccountStatus.ACTIVATED
        )
        db.add(account)
        await db.flush()

        if initial_balance:
            await book_balance_sync(db, account, owner_id, Decimal(initial_balance))

    await db.refresh(account)
    logger.info("Account created: id=%s owner=%s name=%r", account.id, owner_id, name)
    return account


async def update_account(db: AsyncSession, account_id: int, owner_id: int, changes: dict) -> Account:
    """
    Rename an account and/or change its goal.

    `changes` holds only the fields the caller sent, so a goal can be
    cleared with an explicit None. Uniqueness is checked only when the name
    actually changes.
    """
    async with unit_of_work(db):
        account = await get_owned_account(db, account_id, owner_id)

        name = changes.get("name")
        if name is not None and name != account.name:
            if await _name_taken(db, owner_id, name):
                raise NameConflictError("Account", name)
            account.name = name

        if "goal" in changes:
            account.goal = changes["goal"]

    await db.refresh(account)
    return account


async def _set_status(db: AsyncSession, account_id: int, owner_id: int, status: AccountStatus, verb: str) -> Account:
    async with unit_of_work(db):
        account = await get_owned_account(db, account_id, owner_id)
        if account.status == AccountStatus.DELETED:
            raise StateConflictError(f"Account is deleted and cannot be {verb}!")
        account.status = status

    await db.refresh(account)
    logger.info("Account %s %s", account_id, verb)
    return account


async def activate_account(db: AsyncSession, account_id: int, owner_id: int) -> Account:
    return await _set_status(db, account_id, owner_id, AccountStatus.ACTIVATED, "activated")


async def deactivate_account(db: AsyncSession, account_id: int, owner_id: int) -> Account:
    return await _set_status(db, account_id, owner_id, AccountStatus.DEACTIVATED, "deactivated")


async def set_account_goal(db: AsyncSession, account_id: int, owner_id: int, goal: Optional[Decimal]) -> Account:
    return await update_account(db, account_id, owner_id, {"goal": goal})


async def delete_account(db: AsyncSession, account_id: int, owner_id: int) -> Account:
    """
    Soft-delete an account.

    Raises:
        StateConflictError: account already deleted or balance is not zero
    """
    async with unit_of_work(db):
        account = await get_owned_account(db, account_id, owner_id)
        if account.status == AccountStatus.DELETED:
            raise StateConflictError("Account has already been deleted!")
        if account.balance != 0:
            raise StateConflictError("Account balance must be zero to delete account!")
        account.status = AccountStatus.DELETED

    await db.refresh(account)
    logger.info("Account %s deleted", account_id)
    return account


async def create_example_accounts(db: AsyncSession, owner_id: int) -> List[Account]:
    """Create the starter accounts, skipping names the user already has."""
    created = []
    async with unit_of_work(db):
        for name in EXAMPLE_ACCOUNT_NAMES:
            if await _name_taken(db, owner_id, name):
                continue
            account = Account(owner_id=owner_id, name=name, balance=Decimal("0"), status=AccountStatus.ACTIVATED)
            db.add(account)
            created.append(account)
        await db.flush()

    for account in created:
        await db.refresh(account)
    return created
