"""Data access layer for transactions, savings goals and budgets"""

import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from ledgerly.infrastructure.database.models import Transaction, Goal, Budget
from ledgerly.domain.exceptions import PersistenceError
from ledgerly.domain import models as domain


class TransactionRepository:
    """Repository for income and expense transactions"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(self, user_id: str, data: Dict[str, Any]) -> Transaction:
        """Persist a new transaction"""
        db_transaction = Transaction(user_id=user_id, **data)
        self.db.add(db_transaction)
        self.db.flush()  # Get ID without committing
        return db_transaction

    def get_transactions_by_user(self, user_id: str, recurring_only: bool = False) -> List[Transaction]:
        """Fetch a user's transactions, newest first"""
        query = self.db.query(Transaction).filter(Transaction.user_id == user_id)
        if recurring_only:
            query = query.filter(Transaction.recurring.is_(True))
        return query.order_by(Transaction.date.desc()).all()

    def get_transaction(self, user_id: str, transaction_id: uuid.UUID) -> Optional[Transaction]:
        """Fetch one transaction owned by the user"""
        return (
            self.db.query(Transaction)
            .filter(Transaction.id == transaction_id, Transaction.user_id == user_id)
            .first()
        )

    def update_transaction(
        self, user_id: str, transaction_id: uuid.UUID, updates: Dict[str, Any]
    ) -> Optional[Transaction]:
        """Apply a partial update; None when the transaction is not found"""
        db_transaction = self.get_transaction(user_id, transaction_id)
        if db_transaction is None:
            return None
        for name, value in updates.items():
            setattr(db_transaction, name, value)
        self.db.flush()
        return db_transaction

    def delete_transaction(self, user_id: str, transaction_id: uuid.UUID) -> bool:
        db_transaction = self.get_transaction(user_id, transaction_id)
        if db_transaction is None:
            return False
        self.db.delete(db_transaction)
        self.db.flush()
        return True

    def get_records(self, user_id: str) -> List[domain.MonetaryRecord]:
        """Load a user's transactions as plain records for reporting"""
        rows = self.db.query(Transaction).filter(Transaction.user_id == user_id).all()
        return [
            domain.MonetaryRecord(
                amount=Decimal(t.amount),
                date=t.date,
                type=t.type,
                currency=(t.currency or domain.BASE_CURRENCY).upper(),
                category=t.category,
                tags=list(t.tags or []),
            )
            for t in rows
        ]


class GoalRepository:
    """Repository for savings goals"""

    def __init__(self, db: Session):
        self.db = db

    def create_goal(self, user_id: str, data: Dict[str, Any]) -> Goal:
        """Persist a new goal"""
        db_goal = Goal(user_id=user_id, **data)
        self.db.add(db_goal)
        self.db.flush()
        return db_goal

    def get_goals_by_user(self, user_id: str) -> List[Goal]:
        """Fetch a user's goals, nearest deadline first"""
        return (
            self.db.query(Goal)
            .filter(Goal.user_id == user_id)
            .order_by(Goal.deadline.asc())
            .all()
        )

    def get_goal(self, user_id: str, goal_id: uuid.UUID) -> Optional[Goal]:
        return (
            self.db.query(Goal)
            .filter(Goal.id == goal_id, Goal.user_id == user_id)
            .first()
        )

    def update_goal(self, user_id: str, goal_id: uuid.UUID, updates: Dict[str, Any]) -> Optional[Goal]:
        """Apply a partial update; None when the goal is not found"""
        db_goal = self.get_goal(user_id, goal_id)
        if db_goal is None:
            return None
        for name, value in updates.items():
            setattr(db_goal, name, value)
        self.db.flush()
        return db_goal

    def delete_goal(self, user_id: str, goal_id: uuid.UUID) -> bool:
        db_goal = self.get_goal(user_id, goal_id)
        if db_goal is None:
            return False
        self.db.delete(db_goal)
        self.db.flush()
        return True

    def get_auto_allocate_goals(self, user_id: str) -> List[domain.Goal]:
        """Load the user's auto-allocate goals as domain objects"""
        rows = (
            self.db.query(Goal)
            .filter(Goal.user_id == user_id, Goal.auto_allocate.is_(True))
            .all()
        )
        return [
            domain.Goal(
                id=g.id,
                target_amount=Decimal(g.target_amount),
                current_amount=Decimal(g.current_amount or 0),
                achieved=g.achieved,
                auto_allocate_percentage=Decimal(g.auto_allocate_percentage or 0),
            )
            for g in rows
        ]

    def save_progress(self, goal: domain.Goal) -> None:
        """
        Write a goal's current_amount and achieved flag back to its row.

        Raises:
            PersistenceError: row vanished or the flush failed
        """
        try:
            db_goal = self.db.get(Goal, goal.id)
            if db_goal is None:
                raise PersistenceError(f"Goal {goal.id} no longer exists")
            db_goal.current_amount = goal.current_amount
            db_goal.achieved = goal.achieved
            self.db.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save goal {goal.id}: {e}") from e


class BudgetRepository:
    """Repository for per-period budgets"""

    def __init__(self, db: Session):
        self.db = db

    def create_budget(self, user_id: str, data: Dict[str, Any]) -> Budget:
        db_budget = Budget(user_id=user_id, **data)
        self.db.add(db_budget)
        self.db.flush()
        return db_budget

    def get_budgets_by_user(self, user_id: str) -> List[Budget]:
        """Fetch a user's budgets, latest period first"""
        return (
            self.db.query(Budget)
            .filter(Budget.user_id == user_id)
            .order_by(Budget.period.desc())
            .all()
        )

    def get_budget(self, user_id: str, budget_id: uuid.UUID) -> Optional[Budget]:
        return (
            self.db.query(Budget)
            .filter(Budget.id == budget_id, Budget.user_id == user_id)
            .first()
        )

    def update_budget(self, user_id: str, budget_id: uuid.UUID, updates: Dict[str, Any]) -> Optional[Budget]:
        """Apply a partial update; None when the budget is not found"""
        db_budget = self.get_budget(user_id, budget_id)
        if db_budget is None:
            return None
        for name, value in updates.items():
            setattr(db_budget, name, value)
        self.db.flush()
        return db_budget

    def delete_budget(self, user_id: str, budget_id: uuid.UUID) -> bool:
        db_budget = self.get_budget(user_id, budget_id)
        if db_budget is None:
            return False
        self.db.delete(db_budget)
        self.db.flush()
        return True
