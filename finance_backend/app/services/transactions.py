"""
Transaction Store.

Orchestrates the transaction lifecycle. Each create, update, delete and
balance sync runs inside one unit of work:

    validate -> (reverse old) -> apply -> persist

so a rejected request or a failed write leaves every balance and sum as it
was before the call.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from finance_backend.app.core.config import settings
from finance_backend.app.core.exceptions import InvalidDataError, ResourceNotFoundError
from finance_backend.app.core.guards import ownership_guard
from finance_backend.app.db.session import unit_of_work
from finance_backend.app.domain.ledger.engine import LedgerEngine
from finance_backend.app.domain.ledger.shapes import SHAPE_TYPES, EntityRef, LedgerMovement
from finance_backend.app.domain.ledger.validation_gate import ValidationGate
from finance_backend.app.models.account import Account
from finance_backend.app.models.enums import TransactionShape
from finance_backend.app.models.transaction import Transaction
from finance_backend.app.schemas.transaction import TransactionCreate, TransactionUpdate
from finance_backend.app.services.accounts import get_owned_account
from finance_backend.app.services.categories import get_system_expenses_category, get_system_income_category

logger = logging.getLogger("finance.transactions")

BALANCE_SYNC_DESCRIPTION = "Account balance sync"
CENT = Decimal("0.01")


def _movement_of(data: TransactionCreate) -> LedgerMovement:
    return LedgerMovement(
        source=EntityRef(data.from_type, data.from_id),
        destination=EntityRef(data.to_type, data.to_id),
        amount=data.amount,
    )


async def _book(db: AsyncSession, owner_id: int, data: TransactionCreate) -> Transaction:
    """Validate, apply and stage a new transaction. Caller commits."""
    movement = _movement_of(data)
    shape = await ValidationGate.validate(db, movement, owner_id)
    await LedgerEngine.apply(db, movement)

    transaction = Transaction(user_id=owner_id, **data.model_dump())
    db.add(transaction)
    await db.flush()

    logger.info(
        "Transaction %s created: %s %s -> %s amount=%s owner=%s",
        transaction.id, shape.value, movement.source, movement.destination, movement.amount, owner_id
    )
    return transaction


async def get_owned_transaction(db: AsyncSession, transaction_id: int, owner_id: int) -> Transaction:
    result = await db.execute(
        select(Transaction)
        .where(Transaction.id == transaction_id)
        .execution_options(populate_existing=True)
    )
    transaction = result.scalar_one_or_none()
    if not transaction:
        raise ResourceNotFoundError("Transaction", transaction_id)
    ownership_guard.enforce(transaction.user_id, owner_id, "Transaction")
    return transaction


async def get_transaction(db: AsyncSession, transaction_id: int, owner_id: int) -> Transaction:
    return await get_owned_transaction(db, transaction_id, owner_id)


def _filtered(query, owner_id: int, shape: Optional[TransactionShape], start: Optional[date], end: Optional[date],
              from_ref: Optional[EntityRef] = None, to_ref: Optional[EntityRef] = None):
    query = query.where(Transaction.user_id == owner_id)
    if shape is not None:
        from_type, to_type = SHAPE_TYPES[shape]
        query = query.where(Transaction.from_type == from_type, Transaction.to_type == to_type)
    if start is not None:
        query = query.where(Transaction.date_of_completion >= start)
    if end is not None:
        query = query.where(Transaction.date_of_completion <= end)
    if from_ref is not None:
        query = query.where(Transaction.from_type == from_ref.type, Transaction.from_id == from_ref.id)
    if to_ref is not None:
        query = query.where(Transaction.to_type == to_ref.type, Transaction.to_id == to_ref.id)
    return query


async def list_transactions(
    db: AsyncSession,
    owner_id: int,
    shape: Optional[TransactionShape] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    from_ref: Optional[EntityRef] = None,
    to_ref: Optional[EntityRef] = None,
    page: int = 1,
    page_size: int = settings.default_page_size,
) -> Tuple[List[Transaction], int]:
    """
    Page through the owner's transactions, newest first.

    Returns:
        (transactions on the page, total matching count)
    """
    count_query = _filtered(select(func.count(Transaction.id)), owner_id, shape, start, end, from_ref, to_ref)
    total = (await db.execute(count_query)).scalar()

    offset = (page - 1) * page_size
    query = _filtered(select(Transaction), owner_id, shape, start, end, from_ref, to_ref)
    query = query.order_by(Transaction.date_of_completion.desc(), Transaction.id.desc()).offset(offset).limit(page_size)

    result = await db.execute(query)
    return list(result.scalars().all()), total


async def total_transactions_sum(
    db: AsyncSession,
    owner_id: int,
    shape: TransactionShape,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Decimal:
    query = _filtered(select(func.coalesce(func.sum(Transaction.amount), 0)), owner_id, shape, start, end)
    return Decimal((await db.execute(query)).scalar())


async def create_transaction(db: AsyncSession, owner_id: int, data: TransactionCreate) -> Transaction:
    """
    Create a transaction and book its effect.

    Raises:
        InvalidDataError: the validation gate rejected the request
    """
    async with unit_of_work(db):
        transaction = await _book(db, owner_id, data)

    await db.refresh(transaction)
    return transaction


async def update_transaction(db: AsyncSession, transaction_id: int, owner_id: int, data: TransactionUpdate) -> Transaction:
    """
    Replace a transaction's values and move its effect accordingly.

    The new values are validated against the current ledger state before
    the old effect is reversed; a rejected update changes nothing.
    """
    async with unit_of_work(db):
        transaction = await get_owned_transaction(db, transaction_id, owner_id)
        old_movement = LedgerMovement.from_transaction(transaction)
        new_movement = _movement_of(data)

        shape = await ValidationGate.validate(db, new_movement, owner_id)
        await LedgerEngine.reverse(db, old_movement)
        await LedgerEngine.apply(db, new_movement)

        # Owner is not part of the request and stays as it was
        for field, value in data.model_dump().items():
            setattr(transaction, field, value)
        await db.flush()

    await db.refresh(transaction)
    logger.info(
        "Transaction %s updated: %s %s -> %s amount=%s",
        transaction_id, shape.value, new_movement.source, new_movement.destination, new_movement.amount
    )
    return transaction


async def delete_transaction(db: AsyncSession, transaction_id: int, owner_id: int) -> Transaction:
    """
    Reverse a transaction's effect and remove it.

    Returns:
        The transaction as it was before deletion
    """
    async with unit_of_work(db):
        transaction = await get_owned_transaction(db, transaction_id, owner_id)
        await LedgerEngine.reverse(db, LedgerMovement.from_transaction(transaction))
        await db.delete(transaction)

    logger.info("Transaction %s deleted (amount=%s)", transaction_id, transaction.amount)
    return transaction


async def book_balance_sync(db: AsyncSession, account: Account, owner_id: int, new_balance: Decimal) -> Optional[Transaction]:
    """
    Stage the income or expense that moves `account` to `new_balance`.

    Positive differences come from the owner's SYS_INCOME category, negative
    ones go to SYS_EXPENSES. Nothing is booked when the balance already
    matches. Does not commit; the caller owns the unit of work.
    """
    new_balance = Decimal(new_balance)
    if new_balance != new_balance.quantize(CENT):
        raise InvalidDataError("Balance must have at most 2 decimal places!", reason=f"balance {new_balance} is not whole cents")

    delta = new_balance - account.balance
    if delta == 0:
        return None

    if delta > 0:
        category = await get_system_income_category(db, owner_id)
        source, destination = EntityRef.category(category.id), EntityRef.account(account.id)
    else:
        category = await get_system_expenses_category(db, owner_id)
        source, destination = EntityRef.account(account.id), EntityRef.category(category.id)

    data = TransactionCreate(
        date_of_completion=date.today(),
        from_type=source.type,
        from_id=source.id,
        to_type=destination.type,
        to_id=destination.id,
        amount=abs(delta),
        description=BALANCE_SYNC_DESCRIPTION,
        recurring="NO",
        auto_execute=False,
    )
    return await _book(db, owner_id, data)


async def apply_balance_sync(db: AsyncSession, account_id: int, owner_id: int, new_balance: Decimal) -> Account:
    """
    Reconcile an account to an externally observed balance.

    Returns:
        The account with its updated balance
    """
    async with unit_of_work(db):
        account = await get_owned_account(db, account_id, owner_id)
        transaction = await book_balance_sync(db, account, owner_id, new_balance)

    await db.refresh(account)
    if transaction is not None:
        logger.info("Balance sync on account %s: new balance %s", account_id, account.balance)
    return account
