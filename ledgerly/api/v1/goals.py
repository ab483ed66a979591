"""/v1/goals - savings goals and income auto-allocation"""

import logging
import uuid
from decimal import Decimal
from typing import List
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ledgerly.api.v1.schemas import GoalCreate, GoalUpdate, GoalResponse, GoalDetailResponse, MessageResponse
from ledgerly.api.dependencies import get_current_user_id, get_request_id
from ledgerly.api.responses import error_response
from ledgerly.infrastructure.database.session import get_db
from ledgerly.infrastructure.database.repositories import GoalRepository
from ledgerly.infrastructure.observability.metrics import goal_allocation_counter
from ledgerly.domain.allocation import allocate

router = APIRouter()

GOAL_NOT_FOUND = "Goal not found"


def allocate_savings_for_user(db: Session, user_id: str, income_amount: Decimal) -> int:
    """
    Feed a share of an income into every auto-allocate goal of the user.

    Changes are flushed per goal but not committed; the caller owns the commit.

    Raises:
        PersistenceError: a goal could not be saved
    """
    goal_repo = GoalRepository(db)
    goals = goal_repo.get_auto_allocate_goals(user_id)
    updated = allocate(goals, income_amount, goal_repo.save_progress)
    goal_allocation_counter.inc(updated)
    return updated


def _progress(target_amount, current_amount) -> str:
    target = Decimal(target_amount)
    if target <= 0:
        return "0.00"
    return f"{Decimal(current_amount) / target * 100:.2f}"


@router.post("/goals", response_model=GoalResponse, status_code=201)
def create_goal(
    body: GoalCreate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create a savings goal"""
    try:
        db_goal = GoalRepository(db).create_goal(user_id, body.model_dump())
        db.commit()
        return GoalResponse.model_validate(db_goal)
    except Exception as e:
        db.rollback()
        logging.error(f"Error creating goal: {e}", extra={"request_id": get_request_id(request)})
        return error_response(500, "Server Error", str(e))


@router.get("/goals", response_model=List[GoalResponse])
def list_goals(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the user's goals, nearest deadline first"""
    return [GoalResponse.model_validate(g) for g in GoalRepository(db).get_goals_by_user(user_id)]


@router.get("/goals/{goal_id}", response_model=GoalDetailResponse)
def get_goal(
    goal_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Fetch one goal with its progress percentage"""
    db_goal = GoalRepository(db).get_goal(user_id, goal_id)
    if db_goal is None:
        return error_response(404, GOAL_NOT_FOUND)

    goal = GoalResponse.model_validate(db_goal)
    return GoalDetailResponse(
        **goal.model_dump(),
        progress=_progress(db_goal.target_amount, db_goal.current_amount),
    )


@router.put("/goals/{goal_id}", response_model=GoalResponse)
def update_goal(
    goal_id: uuid.UUID,
    body: GoalUpdate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Apply a partial update to a goal"""
    try:
        db_goal = GoalRepository(db).update_goal(user_id, goal_id, body.changes())
        if db_goal is None:
            return error_response(404, GOAL_NOT_FOUND)
        db.commit()
        return GoalResponse.model_validate(db_goal)
    except Exception as e:
        db.rollback()
        logging.error(f"Error updating goal: {e}", extra={"request_id": get_request_id(request)})
        return error_response(500, "Server Error", str(e))


@router.delete("/goals/{goal_id}", response_model=MessageResponse)
def delete_goal(
    goal_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Delete a goal"""
    if not GoalRepository(db).delete_goal(user_id, goal_id):
        return error_response(404, GOAL_NOT_FOUND)
    db.commit()
    return MessageResponse(msg="Goal deleted successfully")
