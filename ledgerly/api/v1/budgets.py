"""/v1/budgets - spending limits per period"""

import logging
import uuid
from typing import List
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ledgerly.api.v1.schemas import BudgetCreate, BudgetUpdate, BudgetResponse, MessageResponse
from ledgerly.api.dependencies import get_current_user_id, get_request_id
from ledgerly.api.responses import error_response
from ledgerly.infrastructure.database.session import get_db
from ledgerly.infrastructure.database.repositories import BudgetRepository
from ledgerly.utils.date_utils import as_utc

router = APIRouter()

BUDGET_NOT_FOUND = "Budget not found"


@router.post("/budgets", response_model=BudgetResponse, status_code=201)
def create_budget(
    body: BudgetCreate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create a budget for a period, optionally limited to one category"""
    try:
        data = body.model_dump()
        data["period"] = as_utc(data["period"])
        db_budget = BudgetRepository(db).create_budget(user_id, data)
        db.commit()
        return BudgetResponse.model_validate(db_budget)
    except Exception as e:
        db.rollback()
        logging.error(f"Error creating budget: {e}", extra={"request_id": get_request_id(request)})
        return error_response(500, "Server Error", str(e))


@router.get("/budgets", response_model=List[BudgetResponse])
def list_budgets(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the user's budgets, latest period first"""
    return [BudgetResponse.model_validate(b) for b in BudgetRepository(db).get_budgets_by_user(user_id)]


@router.get("/budgets/{budget_id}", response_model=BudgetResponse)
def get_budget(
    budget_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    db_budget = BudgetRepository(db).get_budget(user_id, budget_id)
    if db_budget is None:
        return error_response(404, BUDGET_NOT_FOUND)
    return BudgetResponse.model_validate(db_budget)


@router.put("/budgets/{budget_id}", response_model=BudgetResponse)
def update_budget(
    budget_id: uuid.UUID,
    body: BudgetUpdate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Apply a partial update; an explicit null category widens the budget to all expenses"""
    try:
        updates = body.changes()
        if updates.get("period") is not None:
            updates["period"] = as_utc(updates["period"])
        db_budget = BudgetRepository(db).update_budget(user_id, budget_id, updates)
        if db_budget is None:
            return error_response(404, BUDGET_NOT_FOUND)
        db.commit()
        return BudgetResponse.model_validate(db_budget)
    except Exception as e:
        db.rollback()
        logging.error(f"Error updating budget: {e}", extra={"request_id": get_request_id(request)})
        return error_response(500, "Server Error", str(e))


@router.delete("/budgets/{budget_id}", response_model=MessageResponse)
def delete_budget(
    budget_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if not BudgetRepository(db).delete_budget(user_id, budget_id):
        return error_response(404, BUDGET_NOT_FOUND)
    db.commit()
    return MessageResponse(msg="Budget deleted successfully")
