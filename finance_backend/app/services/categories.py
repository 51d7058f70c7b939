"""
Category Store.

Owner-scoped budget categories, including the two hidden system categories
every user gets at registration. System categories never show up in
listings or totals and cannot be renamed or deleted.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from finance_backend.app.core.exceptions import NameConflictError, ResourceNotFoundError, StateConflictError
from finance_backend.app.core.guards import ownership_guard
from finance_backend.app.db.session import unit_of_work
from finance_backend.app.models.category import Category
from finance_backend.app.models.enums import CategoryType, EntityType
from finance_backend.app.models.transaction import Transaction

logger = logging.getLogger("finance.categories")

SYSTEM_INCOME_CATEGORY_NAME = "SYS_INCOME"
SYSTEM_EXPENSES_CATEGORY_NAME = "SYS_EXPENSES"
SYSTEM_CATEGORY_NAMES = (SYSTEM_INCOME_CATEGORY_NAME, SYSTEM_EXPENSES_CATEGORY_NAME)

EXAMPLE_CATEGORY_NAMES = ("Food", "Utilities", "Car", "Loan", "Rent", "Insurance")


async def apply_sum_delta(db: AsyncSession, category_id: int, delta: Decimal):
    """Add `delta` to a category's current period sum in one UPDATE."""
    result = await db.execute(
        update(Category)
        .where(Category.id == category_id)
        .values(current_period_sum=Category.current_period_sum + delta)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise ResourceNotFoundError("Category", category_id)


def is_system_category(category: Category) -> bool:
    return category.name in SYSTEM_CATEGORY_NAMES


async def get_owned_category(db: AsyncSession, category_id: int, owner_id: int) -> Category:
    """Category by id, NotFound if missing, Forbidden if owned by someone else."""
    result = await db.execute(
        select(Category)
        .where(Category.id == category_id)
        .execution_options(populate_existing=True)
    )
    category = result.scalar_one_or_none()
    if not category:
        raise ResourceNotFoundError("Category", category_id)
    ownership_guard.enforce(category.owner_id, owner_id, "Category")
    return category


async def _find_by_name(db: AsyncSession, owner_id: int, name: str) -> Optional[Category]:
    result = await db.execute(
        select(Category)
        .where(Category.owner_id == owner_id, Category.name == name)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def add_system_categories(db: AsyncSession, owner_id: int) -> List[Category]:
    """
    Stage SYS_INCOME and SYS_EXPENSES for a user, skipping existing ones.

    Does not commit; the caller owns the unit of work.
    """
    created = []
    for name, category_type in (
        (SYSTEM_INCOME_CATEGORY_NAME, CategoryType.INCOME),
        (SYSTEM_EXPENSES_CATEGORY_NAME, CategoryType.EXPENSES),
    ):
        if await _find_by_name(db, owner_id, name):
            continue
        category = Category(owner_id=owner_id, name=name, type=category_type, current_period_sum=Decimal("0"))
        db.add(category)
        created.append(category)
    await db.flush()
    return created


async def create_system_categories(db: AsyncSession, owner_id: int) -> List[Category]:
    async with unit_of_work(db):
        created = await add_system_categories(db, owner_id)
    return created


async def _get_system_category(db: AsyncSession, owner_id: int, name: str) -> Category:
    category = await _find_by_name(db, owner_id, name)
    if not category:
        raise ResourceNotFoundError(f"System category {name}")
    return category


async def get_system_income_category(db: AsyncSession, owner_id: int) -> Category:
    return await _get_system_category(db, owner_id, SYSTEM_INCOME_CATEGORY_NAME)


async def get_system_expenses_category(db: AsyncSession, owner_id: int) -> Category:
    return await _get_system_category(db, owner_id, SYSTEM_EXPENSES_CATEGORY_NAME)


async def get_category(db: AsyncSession, category_id: int, owner_id: int) -> Category:
    return await get_owned_category(db, category_id, owner_id)


async def list_categories(db: AsyncSession, owner_id: int, category_type: Optional[CategoryType] = None) -> List[Category]:
    """User categories, optionally of one type. System categories are hidden."""
    query = select(Category).where(
        Category.owner_id == owner_id,
        Category.name.not_in(SYSTEM_CATEGORY_NAMES)
    )
    if category_type is not None:
        query = query.where(Category.type == category_type)

    result = await db.execute(query.order_by(Category.id).execution_options(populate_existing=True))
    return list(result.scalars().all())


async def total_current_period_sum(db: AsyncSession, owner_id: int, category_type: CategoryType) -> Decimal:
    result = await db.execute(
        select(func.coalesce(func.sum(Category.current_period_sum), 0)).where(
            Category.owner_id == owner_id,
            Category.type == category_type,
            Category.name.not_in(SYSTEM_CATEGORY_NAMES)
        )
    )
    return Decimal(result.scalar())


async def category_added_sum(db: AsyncSession, category_id: int, owner_id: int, start: date, end: date) -> Decimal:
    """
    Amount booked against a category between two dates (inclusive).

    INCOME categories count income transactions drawn from them; EXPENSES
    categories count expense transactions landing in them.
    """
    category = await get_owned_category(db, category_id, owner_id)

    if category.type == CategoryType.INCOME:
        condition = (
            (Transaction.from_type == EntityType.CATEGORY)
            & (Transaction.from_id == category_id)
            & (Transaction.to_type == EntityType.ACCOUNT)
        )
    else:
        condition = (
            (Transaction.from_type == EntityType.ACCOUNT)
            & (Transaction.to_type == EntityType.CATEGORY)
            & (Transaction.to_id == category_id)
        )

    result = await db.execute(
        select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.user_id == owner_id,
            Transaction.date_of_completion.between(start, end),
            condition
        )
    )
    return Decimal(result.scalar())


async def count_category_references(db: AsyncSession, category_id: int) -> int:
    """Number of transactions with the category on either side."""
    result = await db.execute(
        select(func.count(Transaction.id)).where(
            ((Transaction.from_type == EntityType.CATEGORY) & (Transaction.from_id == category_id))
            | ((Transaction.to_type == EntityType.CATEGORY) & (Transaction.to_id == category_id))
        )
    )
    return result.scalar()


async def _ensure_name_available(db: AsyncSession, owner_id: int, name: str):
    if name in SYSTEM_CATEGORY_NAMES or await _find_by_name(db, owner_id, name):
        raise NameConflictError("Category", name)


async def create_category(
    db: AsyncSession,
    owner_id: int,
    name: str,
    category_type: CategoryType,
    limit: Optional[str] = None,
) -> Category:
    """Create a user category with an empty period sum."""
    async with unit_of_work(db):
        await _ensure_name_available(db, owner_id, name)
        category = Category(
            owner_id=owner_id,
            name=name,
            type=category_type,
            current_period_sum=Decimal("0"),
            limit=limit
        )
        db.add(category)
        await db.flush()

    await db.refresh(category)
    logger.info("Category created: id=%s owner=%s name=%r type=%s", category.id, owner_id, name, category_type.value)
    return category


async def update_category(db: AsyncSession, category_id: int, owner_id: int, changes: dict) -> Category:
    """
    Rename a category and/or change its limit.

    Raises:
        StateConflictError: the category is a system category
        NameConflictError: the new name is already used by this owner
    """
    async with unit_of_work(db):
        category = await get_owned_category(db, category_id, owner_id)
        if is_system_category(category):
            raise StateConflictError("System categories cannot be modified!")

        name = changes.get("name")
        if name is not None and name != category.name:
            await _ensure_name_available(db, owner_id, name)
            category.name = name

        if "limit" in changes:
            category.limit = changes["limit"]

    await db.refresh(category)
    return category


async def set_category_limit(db: AsyncSession, category_id: int, owner_id: int, limit: Optional[str]) -> Category:
    return await update_category(db, category_id, owner_id, {"limit": limit})


async def delete_category(db: AsyncSession, category_id: int, owner_id: int) -> Category:
    """
    Hard-delete a user category.

    Unlike accounts there is no zero-sum precondition. Transactions that
    reference the category are kept, but can no longer be updated or
    deleted since their effect cannot be reversed.
    """
    async with unit_of_work(db):
        category = await get_owned_category(db, category_id, owner_id)
        if is_system_category(category):
            raise StateConflictError("System categories cannot be deleted!")
        references = await count_category_references(db, category_id)
        await db.delete(category)

    if references:
        logger.warning(
            "Category %s deleted with %s referencing transactions; they can no longer be updated or deleted",
            category_id, references
        )
    else:
        logger.info("Category %s deleted", category_id)
    return category


async def create_example_categories(db: AsyncSession, owner_id: int) -> List[Category]:
    """Create the starter EXPENSES categories, skipping names already used."""
    created = []
    async with unit_of_work(db):
        for name in EXAMPLE_CATEGORY_NAMES:
            if await _find_by_name(db, owner_id, name):
                continue
            category = Category(owner_id=owner_id, name=name, type=CategoryType.EXPENSES, current_period_sum=Decimal("0"))
            db.add(category)
            created.append(category)
        await db.flush()

    for category in created:
        await db.refresh(category)
    return created
