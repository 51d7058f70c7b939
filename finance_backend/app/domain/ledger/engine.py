"""
Ledger Engine.

Applies or reverses the numeric effect of an already validated movement.
The engine never re-validates: it looks the shape up and writes one atomic
delta per endpoint through the owning store.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from finance_backend.app.domain.ledger.shapes import APPLY_SIGNS, EntityRef, LedgerMovement
from finance_backend.app.models.enums import EntityType
from finance_backend.app.services.accounts import apply_balance_delta
from finance_backend.app.services.categories import apply_sum_delta

logger = logging.getLogger("finance.ledger")

# Entity tag -> store operation that adds a delta to the referenced row
DELTA_WRITERS = {
    EntityType.ACCOUNT: apply_balance_delta,
    EntityType.CATEGORY: apply_sum_delta,
}


class LedgerEngine:

    @staticmethod
    async def _write(db: AsyncSession, ref: EntityRef, delta: Decimal):
        await DELTA_WRITERS[ref.type](db, ref.id, delta)

    @staticmethod
    async def _shift(db: AsyncSession, movement: LedgerMovement, direction: int):
        source_sign, destination_sign = APPLY_SIGNS[movement.shape]
        amount = Decimal(movement.amount)
        await LedgerEngine._write(db, movement.source, amount * source_sign * direction)
        await LedgerEngine._write(db, movement.destination, amount * destination_sign * direction)

    @staticmethod
    async def apply(db: AsyncSession, movement: LedgerMovement):
        """Book the movement's effect on both endpoints."""
        await LedgerEngine._shift(db, movement, 1)
        logger.debug("Applied %s %s -> %s (%s)", movement.shape.value, movement.source, movement.destination, movement.amount)

    @staticmethod
    async def reverse(db: AsyncSession, movement: LedgerMovement):
        """Undo exactly what `apply` booked for the same movement."""
        await LedgerEngine._shift(db, movement, -1)
        logger.debug("Reversed %s %s -> %s (%s)", movement.shape.value, movement.source, movement.destination, movement.amount)
