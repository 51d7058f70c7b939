"""
Entity references and the transaction shape table.

A transaction endpoint is a tagged reference: the tag picks the store
(accounts or categories) and the id picks the row. The (from, to) tag pair
decides the shape, and the shape decides the arithmetic.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Tuple

from finance_backend.app.models.enums import EntityType, TransactionShape


@dataclass(frozen=True)
class EntityRef:
    """Reference to an account or a category."""

    type: EntityType
    id: int

    @classmethod
    def account(cls, account_id: int) -> "EntityRef":
        return cls(EntityType.ACCOUNT, account_id)

    @classmethod
    def category(cls, category_id: int) -> "EntityRef":
        return cls(EntityType.CATEGORY, category_id)

    @property
    def is_account(self) -> bool:
        return self.type is EntityType.ACCOUNT

    def __str__(self) -> str:
        return f"{self.type.value}:{self.id}"


@dataclass(frozen=True)
class LedgerMovement:
    """
    The from/to/amount triple that the ledger acts on.

    Built either from an incoming request or from a stored transaction, so
    the stored row and the applied effect can never disagree.
    """

    source: EntityRef
    destination: EntityRef
    amount: Decimal

    @classmethod
    def from_transaction(cls, transaction) -> "LedgerMovement":
        return cls(
            source=EntityRef(transaction.from_type, transaction.from_id),
            destination=EntityRef(transaction.to_type, transaction.to_id),
            amount=transaction.amount,
        )

    @property
    def shape(self) -> Optional[TransactionShape]:
        return shape_of(self.source.type, self.destination.type)


# (from type, to type) -> shape; CATEGORY -> CATEGORY is absent on purpose
SHAPES: Dict[Tuple[EntityType, EntityType], TransactionShape] = {
    (EntityType.CATEGORY, EntityType.ACCOUNT): TransactionShape.INCOME,
    (EntityType.ACCOUNT, EntityType.CATEGORY): TransactionShape.EXPENSE,
    (EntityType.ACCOUNT, EntityType.ACCOUNT): TransactionShape.TRANSFER,
}

# Reverse lookup used for filtering stored transactions by shape
SHAPE_TYPES: Dict[TransactionShape, Tuple[EntityType, EntityType]] = {
    shape: types for types, shape in SHAPES.items()
}

# Sign applied to the amount on the source and on the destination when a
# movement is applied. Reversal negates both.
#   income:   category.sum += amount, account.balance += amount
#   expense:  account.balance -= amount, category.sum += amount
#   transfer: from.balance -= amount, to.balance += amount
APPLY_SIGNS: Dict[TransactionShape, Tuple[int, int]] = {
    TransactionShape.INCOME: (1, 1),
    TransactionShape.EXPENSE: (-1, 1),
    TransactionShape.TRANSFER: (-1, 1),
}


def shape_of(from_type: EntityType, to_type: EntityType) -> Optional[TransactionShape]:
    """Shape for a tag pair, or None when the pair is not a legal movement."""
    return SHAPES.get((EntityType(from_type), EntityType(to_type)))
