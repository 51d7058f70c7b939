"""
Ledger enumerations.

Defines account lifecycle states, category kinds, the entity tag used by
transaction endpoints and the three legal transaction shapes.
"""

import enum


class AccountStatus(str, enum.Enum):
    """
    Account lifecycle state.

    States:
        ACTIVATED: May take part in new transactions
        DEACTIVATED: Kept but frozen; can be re-activated
        DELETED: Soft-deleted, terminal
    """
    ACTIVATED = "ACTIVATED"
    DEACTIVATED = "DEACTIVATED"
    DELETED = "DELETED"


class CategoryType(str, enum.Enum):
    """Budget category kind."""
    INCOME = "INCOME"
    EXPENSES = "EXPENSES"


class EntityType(str, enum.Enum):
    """Which store a transaction endpoint id refers to."""
    ACCOUNT = "ACCOUNT"
    CATEGORY = "CATEGORY"


class TransactionShape(str, enum.Enum):
    """
    Transaction shape derived from the (from, to) entity types.

    Shapes:
        INCOME: CATEGORY -> ACCOUNT
        EXPENSE: ACCOUNT -> CATEGORY
        TRANSFER: ACCOUNT -> ACCOUNT
    """
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
