"""
Validation Gate.

Decides whether a proposed movement may be applied for a given owner.
Every failed rule raises the same InvalidDataError; the rule that failed is
only carried in `details["reason"]` and in the log.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional, Type, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finance_backend.app.core.exceptions import InvalidDataError
from finance_backend.app.domain.ledger.shapes import EntityRef, LedgerMovement
from finance_backend.app.models.account import Account
from finance_backend.app.models.category import Category
from finance_backend.app.models.enums import AccountStatus, CategoryType, EntityType, TransactionShape

logger = logging.getLogger("finance.ledger")

INVALID_FROM_TO_MESSAGE = "Transaction contains invalid from-to data!"

# Entity tag -> table holding the referenced row
ENTITY_MODELS: Dict[EntityType, Type[Union[Account, Category]]] = {
    EntityType.ACCOUNT: Account,
    EntityType.CATEGORY: Category,
}


class ValidationGate:

    @staticmethod
    async def load(db: AsyncSession, ref: EntityRef) -> Optional[Union[Account, Category]]:
        """
        Fetch the row behind a reference with fresh values.

        Rows are locked for the rest of the unit of work so the funds check
        and the following balance delta see the same balance.
        """
        model = ENTITY_MODELS[ref.type]
        result = await db.execute(
            select(model)
            .where(model.id == ref.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _reject(movement: LedgerMovement, owner_id: int, reason: str):
        logger.warning(
            "Transaction rejected: %s (%s -> %s, amount=%s, owner=%s)",
            reason, movement.source, movement.destination, movement.amount, owner_id
        )
        raise InvalidDataError(INVALID_FROM_TO_MESSAGE, reason=reason)

    @staticmethod
    async def validate(db: AsyncSession, movement: LedgerMovement, owner_id: int) -> TransactionShape:
        """
        Check a movement against the current ledger state.

        Rules, in order:
        1. amount is present and positive
        2. both endpoints exist
        3. both endpoints are owned by `owner_id`
        4. any account endpoint is ACTIVATED
        5. the tag pair is a legal shape (never CATEGORY -> CATEGORY)
        6. income draws from an INCOME category
        7. expense lands in an EXPENSES category
        8. transfer source balance covers the amount

        Expenses have no funds check and may take a balance below zero.

        Returns:
            The movement's shape

        Raises:
            InvalidDataError: on the first failed rule
        """
        reject = ValidationGate._reject

        if movement.amount is None or Decimal(movement.amount) <= 0:
            reject(movement, owner_id, "amount must be positive")

        source = await ValidationGate.load(db, movement.source)
        if source is None:
            reject(movement, owner_id, f"source {movement.source} does not exist")
        destination = await ValidationGate.load(db, movement.destination)
        if destination is None:
            reject(movement, owner_id, f"destination {movement.destination} does not exist")

        if source.owner_id != owner_id or destination.owner_id != owner_id:
            reject(movement, owner_id, "entity not owned by user")

        for ref, entity in ((movement.source, source), (movement.destination, destination)):
            if ref.is_account and entity.status != AccountStatus.ACTIVATED:
                reject(movement, owner_id, f"account {ref.id} is {entity.status.value}")

        shape = movement.shape
        if shape is None:
            reject(movement, owner_id, "category to category transactions are not allowed")

        if shape is TransactionShape.INCOME and source.type != CategoryType.INCOME:
            reject(movement, owner_id, "income must come from an INCOME category")

        if shape is TransactionShape.EXPENSE and destination.type != CategoryType.EXPENSES:
            reject(movement, owner_id, "expense must go to an EXPENSES category")

        if shape is TransactionShape.TRANSFER and source.balance < movement.amount:
            reject(movement, owner_id, "insufficient funds for transfer")

        return shape
