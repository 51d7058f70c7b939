"""
Reporting period model.
"""

from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey
from sqlalchemy.sql import func
from finance_backend.app.db.session import Base
from finance_backend.app.models.account import MONEY


class ReportingPeriod(Base):
    __tablename__ = "reporting_periods"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)

    end_date = Column(Date, nullable=False)
    end_sum = Column(MONEY, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<ReportingPeriod(id={self.id}, end_date={self.end_date}, end_sum={self.end_sum})>"
