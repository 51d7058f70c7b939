"""
Account database model.

An account is a user-owned balance holder (cash, bank account, savings).
"""

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum
from sqlalchemy.sql import func
from finance_backend.app.db.session import Base
from finance_backend.app.models.enums import AccountStatus

# Money columns: fixed-point, two decimal places
MONEY = Numeric(14, 2)


class Account(Base):
    """
    Account model.

    `balance` is only ever changed through ledger deltas. Deletion is a
    state change to DELETED and requires a zero balance; the row is kept.
    """
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Ownership
    owner_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)

    name = Column(String(200), nullable=False)
    balance = Column(MONEY, nullable=False, default=0)
    goal = Column(MONEY, nullable=True)
    status = Column(Enum(AccountStatus), default=AccountStatus.ACTIVATED, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Account(id={self.id}, name='{self.name}', owner_id={self.owner_id}, balance={self.balance}, status={self.status})>"
