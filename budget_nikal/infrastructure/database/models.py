"""SQLAlchemy ORM models for budgets, cards, statements and line items"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Date, Integer, ForeignKey, Numeric, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

Money = Numeric(12, 2)


class CreditCard(Base):
    """User's credit card with its billing cycle configuration"""

    __tablename__ = "credit_cards"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    nickname = Column(String(100), nullable=False)
    issuer = Column(String(100), nullable=True)
    last4 = Column(String(4), nullable=True)
    statement_day = Column(Integer, nullable=True)  # legacy day-of-month, 1-31
    due_day = Column(Integer, nullable=True)  # legacy day-of-month, 1-31
    day_difference = Column(Integer, nullable=False)
    first_statement_date = Column(Date, nullable=True)
    billing_cycle_days = Column(Integer, nullable=True, default=30)
    total_limit = Column(Money, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    statements = relationship("CardStatement", back_populates="card", cascade="all, delete-orphan")


class CardStatement(Base):
    """One billing cycle of a card, keyed by the month its due date falls in"""

    __tablename__ = "card_statements"
    __table_args__ = (UniqueConstraint("card_id", "year", "month", name="uq_statement_card_month"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    card_id = Column(UUID(as_uuid=True), ForeignKey("credit_cards.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    statement_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    total_due = Column(Money, nullable=False, default=0)
    minimum_due = Column(Money, nullable=False, default=0)
    available_limit = Column(Money, nullable=False, default=0)  # informational only
    status = Column(String(20), nullable=False, default="pending")
    paid_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    card = relationship("CreditCard", back_populates="statements")


class Loan(Base):
    """Installment loan, materialized as a LOAN expense every month"""

    __tablename__ = "loans"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    installment_amount = Column(Money, nullable=False)
    next_due_date = Column(Date, nullable=False)
    recurring = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Budget(Base):
    """Monthly budget container"""

    __tablename__ = "budgets"
    __table_args__ = (UniqueConstraint("user_id", "year", "month", name="uq_budget_user_month"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    balance_used = Column(Money, nullable=False, default=0)  # running cash-out total
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    incomes = relationship("Income", back_populates="budget", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="budget", cascade="all, delete-orphan")


class Income(Base):
    """Income line item; cash-out withdrawals are recorded as DONE incomes"""

    __tablename__ = "incomes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    budget_id = Column(UUID(as_uuid=True), ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False, index=True)
    source = Column(String(200), nullable=False)
    amount = Column(Money, nullable=False)
    recurring = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default="pending")
    paid_date = Column(Date, nullable=True)
    is_cash_out = Column(Boolean, nullable=False, default=False)
    source_card_id = Column(UUID(as_uuid=True), ForeignKey("credit_cards.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    budget = relationship("Budget", back_populates="incomes")


class Expense(Base):
    """Expense line item tagged REGULAR, CARD_BILL or LOAN"""

    __tablename__ = "expenses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    budget_id = Column(UUID(as_uuid=True), ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False, index=True)
    label = Column(String(200), nullable=False)
    amount = Column(Money, nullable=False)
    recurring = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default="pending")
    paid_date = Column(Date, nullable=True)
    kind = Column(String(20), nullable=False, default="REGULAR")
    linked_card_statement_id = Column(
        UUID(as_uuid=True), ForeignKey("card_statements.id", ondelete="SET NULL"), nullable=True, index=True
    )
    linked_loan_id = Column(UUID(as_uuid=True), ForeignKey("loans.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    budget = relationship("Budget", back_populates="expenses")
