"""
Category database model.

Budget buckets of type INCOME or EXPENSES that accumulate a running sum
for the current reporting period.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from finance_backend.app.db.session import Base
from finance_backend.app.models.account import MONEY
from finance_backend.app.models.enums import CategoryType


class Category(Base):
    """
    Category model.

    Every user also owns two hidden system categories (SYS_INCOME and
    SYS_EXPENSES) used to book manual balance adjustments.
    """
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)

    name = Column(String(200), nullable=False)
    type = Column(Enum(CategoryType), nullable=False)
    current_period_sum = Column(MONEY, nullable=False, default=0)

    # Free-form, interpreted by the client
    limit = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}', type={self.type}, sum={self.current_period_sum})>"
