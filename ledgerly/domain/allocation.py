"""Savings auto-allocation of incoming income across goals"""

from decimal import Decimal
from typing import Callable, Iterable

from ledgerly.domain.exceptions import PersistenceError
from ledgerly.domain.models import Goal


def allocate(
    goals: Iterable[Goal],
    income_amount: Decimal,
    persist: Callable[[Goal], None],
) -> int:
    """
    Add a percentage of an income amount to each auto-allocate goal.

    For every goal:
    - allocation = income_amount * (auto_allocate_percentage / 100)
    - achieved flips to True once current_amount reaches target_amount
      (never back to False)
    - the goal is persisted on its own before the next one is touched

    There is no batch atomicity: if persisting a goal fails, the goals saved
    before it keep their update and the rest are skipped.

    Returns:
        Number of goals updated

    Raises:
        PersistenceError: persisting a goal failed
    """
    income = Decimal(income_amount)
    updated = 0

    for goal in goals:
        allocation = income * (Decimal(goal.auto_allocate_percentage) / 100)
        goal.current_amount = Decimal(goal.current_amount) + allocation
        if goal.current_amount >= goal.target_amount:
            goal.achieved = True

        try:
            persist(goal)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to save goal {goal.id}: {e}") from e
        updated += 1

    return updated
