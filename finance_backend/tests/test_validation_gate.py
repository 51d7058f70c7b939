"""
Tests for the shape table and the validation gate.

Every rejected request must raise InvalidDataError before any balance or
sum is touched.
"""

import pytest
from decimal import Decimal

from finance_backend.app.core.exceptions import InvalidDataError
from finance_backend.app.domain.ledger.shapes import EntityRef, LedgerMovement, SHAPES, shape_of
from finance_backend.app.domain.ledger.validation_gate import INVALID_FROM_TO_MESSAGE, ValidationGate
from finance_backend.app.models.enums import CategoryType, EntityType, TransactionShape
from finance_backend.app.services import accounts as account_service

ACCOUNT = EntityType.ACCOUNT
CATEGORY = EntityType.CATEGORY


def movement(source: EntityRef, destination: EntityRef, amount) -> LedgerMovement:
    return LedgerMovement(source=source, destination=destination, amount=Decimal(amount))


async def assert_rejected(db_session, request: LedgerMovement, owner_id: int, reason_fragment: str):
    with pytest.raises(InvalidDataError) as exc_info:
        await ValidationGate.validate(db_session, request, owner_id)
    assert exc_info.value.message == INVALID_FROM_TO_MESSAGE
    assert exc_info.value.status_code == 400
    assert reason_fragment in exc_info.value.details["reason"]


# TEST 1: Shape table
def test_shape_table_is_exhaustive():
    """Only income, expense and transfer pairs are legal."""
    assert shape_of(CATEGORY, ACCOUNT) is TransactionShape.INCOME
    assert shape_of(ACCOUNT, CATEGORY) is TransactionShape.EXPENSE
    assert shape_of(ACCOUNT, ACCOUNT) is TransactionShape.TRANSFER
    assert shape_of(CATEGORY, CATEGORY) is None
    assert len(SHAPES) == 3


def test_shape_of_accepts_raw_tags():
    assert shape_of("CATEGORY", "ACCOUNT") is TransactionShape.INCOME


def test_entity_ref_helpers():
    assert EntityRef.account(3) == EntityRef(ACCOUNT, 3)
    assert EntityRef.account(3).is_account
    assert not EntityRef.category(3).is_account
    assert str(EntityRef.category(7)) == "CATEGORY:7"


# TEST 2: Valid shapes pass
@pytest.mark.asyncio
async def test_valid_shapes_return_their_shape(db_session, owner, make_account, make_category):
    wallet = await make_account(owner, "Wallet", "50")
    bank = await make_account(owner, "Bank")
    salary = await make_category(owner, "Salary", CategoryType.INCOME)
    food = await make_category(owner, "Food", CategoryType.EXPENSES)

    income = movement(EntityRef.category(salary), EntityRef.account(wallet), "10")
    expense = movement(EntityRef.account(wallet), EntityRef.category(food), "10")
    transfer = movement(EntityRef.account(wallet), EntityRef.account(bank), "50")

    assert await ValidationGate.validate(db_session, income, owner) is TransactionShape.INCOME
    assert await ValidationGate.validate(db_session, expense, owner) is TransactionShape.EXPENSE
    assert await ValidationGate.validate(db_session, transfer, owner) is TransactionShape.TRANSFER


# TEST 3: Existence
@pytest.mark.asyncio
async def test_missing_entities_are_rejected(db_session, owner, make_account):
    wallet = await make_account(owner, "Wallet")

    await assert_rejected(
        db_session, movement(EntityRef.category(999), EntityRef.account(wallet), "10"), owner, "source"
    )
    await assert_rejected(
        db_session, movement(EntityRef.account(wallet), EntityRef.account(999), "10"), owner, "destination"
    )


# TEST 4: Ownership
@pytest.mark.asyncio
async def test_foreign_entities_are_rejected(db_session, owner, other_owner, make_account, make_category):
    mine = await make_account(owner, "Wallet", "100")
    theirs = await make_account(other_owner, "Their wallet")
    their_salary = await make_category(other_owner, "Salary", CategoryType.INCOME)

    await assert_rejected(
        db_session, movement(EntityRef.account(mine), EntityRef.account(theirs), "10"), owner, "not owned"
    )
    await assert_rejected(
        db_session, movement(EntityRef.category(their_salary), EntityRef.account(mine), "10"), owner, "not owned"
    )


# TEST 5: Account activation
@pytest.mark.asyncio
async def test_inactive_accounts_are_rejected(db_session, owner, make_account, make_category):
    salary = await make_category(owner, "Salary", CategoryType.INCOME)
    frozen = await make_account(owner, "Frozen")
    gone = await make_account(owner, "Gone")
    await account_service.deactivate_account(db_session, frozen, owner)
    await account_service.delete_account(db_session, gone, owner)

    await assert_rejected(
        db_session, movement(EntityRef.category(salary), EntityRef.account(frozen), "10"), owner, "DEACTIVATED"
    )
    await assert_rejected(
        db_session, movement(EntityRef.category(salary), EntityRef.account(gone), "10"), owner, "DELETED"
    )


# TEST 6: Category to category
@pytest.mark.asyncio
async def test_category_to_category_is_always_rejected(db_session, owner, make_category):
    salary = await make_category(owner, "Salary", CategoryType.INCOME)
    food = await make_category(owner, "Food", CategoryType.EXPENSES)

    for amount in ("0.01", "10", "1000000"):
        await assert_rejected(
            db_session, movement(EntityRef.category(salary), EntityRef.category(food), amount), owner, "category to category"
        )


# TEST 7: Category types
@pytest.mark.asyncio
async def test_income_requires_income_category(db_session, owner, make_account, make_category):
    wallet = await make_account(owner, "Wallet")
    food = await make_category(owner, "Food", CategoryType.EXPENSES)

    await assert_rejected(
        db_session, movement(EntityRef.category(food), EntityRef.account(wallet), "10"), owner, "INCOME category"
    )


@pytest.mark.asyncio
async def test_expense_requires_expenses_category(db_session, owner, make_account, make_category):
    wallet = await make_account(owner, "Wallet", "100")
    salary = await make_category(owner, "Salary", CategoryType.INCOME)

    await assert_rejected(
        db_session, movement(EntityRef.account(wallet), EntityRef.category(salary), "10"), owner, "EXPENSES category"
    )


# TEST 8: Funds
@pytest.mark.asyncio
async def test_transfer_requires_sufficient_funds(db_session, owner, make_account):
    wallet = await make_account(owner, "Wallet", "50")
    bank = await make_account(owner, "Bank")

    await assert_rejected(
        db_session, movement(EntityRef.account(wallet), EntityRef.account(bank), "50.01"), owner, "insufficient funds"
    )


@pytest.mark.asyncio
async def test_expense_has_no_funds_floor(db_session, owner, make_account, make_category):
    wallet = await make_account(owner, "Wallet", "50")
    food = await make_category(owner, "Food", CategoryType.EXPENSES)

    shape = await ValidationGate.validate(
        db_session, movement(EntityRef.account(wallet), EntityRef.category(food), "500"), owner
    )
    assert shape is TransactionShape.EXPENSE


# TEST 9: Amount
@pytest.mark.asyncio
async def test_non_positive_amounts_are_rejected(db_session, owner, make_account, make_category):
    wallet = await make_account(owner, "Wallet")
    salary = await make_category(owner, "Salary", CategoryType.INCOME)

    for amount in ("0", "-5"):
        await assert_rejected(
            db_session, movement(EntityRef.category(salary), EntityRef.account(wallet), amount), owner, "amount"
        )
    await assert_rejected(
        db_session,
        LedgerMovement(EntityRef.category(salary), EntityRef.account(wallet), None),
        owner,
        "amount"
    )
