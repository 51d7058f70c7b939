"""
Transaction database model.

`from_id`/`to_id` are polymorphic references: the matching `*_type` column
says whether the id belongs to the accounts or the categories table, so
there is deliberately no foreign key on them.
"""

from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey, Enum, Index
from sqlalchemy.sql import func
from finance_backend.app.db.session import Base
from finance_backend.app.models.account import MONEY
from finance_backend.app.models.enums import EntityType


class Transaction(Base):
    """A directed movement of `amount` from one entity to another."""
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)

    date_of_completion = Column(Date, nullable=False, index=True)

    from_type = Column(Enum(EntityType), nullable=False)
    from_id = Column(Integer, nullable=False)
    to_type = Column(Enum(EntityType), nullable=False)
    to_id = Column(Integer, nullable=False)

    amount = Column(MONEY, nullable=False)
    description = Column(String(500), nullable=True)

    # Stored metadata only; nothing schedules recurring or auto-executed transactions
    recurring = Column(String(50), nullable=True)
    auto_execute = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_transactions_from", "from_type", "from_id"),
        Index("ix_transactions_to", "to_type", "to_id"),
    )

    def __repr__(self):
        return (
            f"<Transaction(id={self.id}, {self.from_type}:{self.from_id} -> "
            f"{self.to_type}:{self.to_id}, amount={self.amount})>"
        )
