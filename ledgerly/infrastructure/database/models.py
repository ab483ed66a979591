"""SQLAlchemy ORM models for transactions, savings goals and budgets"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Numeric, Text, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Transaction(Base):
    """Income or expense entry"""

    __tablename__ = "ledger_transaction"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    type = Column(String(10), nullable=False)  # income | expense
    date = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    category = Column(Text, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    description = Column(Text, nullable=True)
    recurring = Column(Boolean, nullable=False, default=False)
    recurrence_pattern = Column(String(10), nullable=True)  # daily | weekly | monthly
    recurrence_end_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class Goal(Base):
    """Savings goal, optionally fed by a share of every income"""

    __tablename__ = "savings_goal"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    description = Column(Text, nullable=False)
    target_amount = Column(Numeric(14, 2), nullable=False)
    current_amount = Column(Numeric(14, 2), nullable=False, default=0)
    deadline = Column(DateTime(timezone=True), nullable=False)
    achieved = Column(Boolean, nullable=False, default=False)
    auto_allocate = Column(Boolean, nullable=False, default=False)
    auto_allocate_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class Budget(Base):
    """Spending limit for one period, for one category or for all expenses"""

    __tablename__ = "budget"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    category = Column(Text, nullable=True)  # None covers all expenses
    period = Column(DateTime(timezone=True), nullable=False)  # start of the budget period
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
