"""/v1/transactions - income and expense entries"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ledgerly.api.v1.schemas import TransactionCreate, TransactionUpdate, TransactionResponse, MessageResponse
from ledgerly.api.v1.goals import allocate_savings_for_user
from ledgerly.api.dependencies import get_current_user_id, get_request_id
from ledgerly.api.responses import error_response
from ledgerly.infrastructure.database.session import get_db
from ledgerly.infrastructure.database.repositories import TransactionRepository
from ledgerly.domain.exceptions import PersistenceError
from ledgerly.utils.date_utils import as_utc

router = APIRouter()

TRANSACTION_NOT_FOUND = "Transaction not found"


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def create_transaction(
    body: TransactionCreate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Record an income or expense.

    Flow:
    1. Persist the transaction
    2. For incomes, allocate savings to the user's auto-allocate goals
    3. Commit both together
    """
    request_id = get_request_id(request)

    try:
        data = body.model_dump()
        data["date"] = as_utc(data["date"]) if data["date"] else datetime.now(timezone.utc)
        if data["recurrence_end_date"]:
            data["recurrence_end_date"] = as_utc(data["recurrence_end_date"])

        db_transaction = TransactionRepository(db).create_transaction(user_id, data)

        if body.type == "income":
            updated = allocate_savings_for_user(db, user_id, body.amount)
            logging.info(
                "Savings allocated",
                extra={"request_id": request_id, "user_id": user_id, "step": "allocate", "goals_updated": updated},
            )

        db.commit()
        return TransactionResponse.model_validate(db_transaction)

    except PersistenceError as e:
        db.rollback()
        logging.error(f"Error allocating savings: {e}", extra={"request_id": request_id})
        return error_response(500, "Server Error", str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Error creating transaction: {e}", extra={"request_id": request_id})
        return error_response(500, "Server Error", str(e))


@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the user's transactions, newest first"""
    transactions = TransactionRepository(db).get_transactions_by_user(user_id)
    return [TransactionResponse.model_validate(t) for t in transactions]


@router.get("/transactions/recurring/upcoming", response_model=List[TransactionResponse])
def list_recurring_transactions(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the user's recurring transactions, newest first"""
    transactions = TransactionRepository(db).get_transactions_by_user(user_id, recurring_only=True)
    return [TransactionResponse.model_validate(t) for t in transactions]


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    db_transaction = TransactionRepository(db).get_transaction(user_id, transaction_id)
    if db_transaction is None:
        return error_response(404, TRANSACTION_NOT_FOUND)
    return TransactionResponse.model_validate(db_transaction)


@router.put("/transactions/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: uuid.UUID,
    body: TransactionUpdate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Apply a partial update to a transaction"""
    try:
        updates = body.changes()
        for name in ("date", "recurrence_end_date"):
            if updates.get(name) is not None:
                updates[name] = as_utc(updates[name])
        db_transaction = TransactionRepository(db).update_transaction(user_id, transaction_id, updates)
        if db_transaction is None:
            return error_response(404, TRANSACTION_NOT_FOUND)
        db.commit()
        return TransactionResponse.model_validate(db_transaction)
    except Exception as e:
        db.rollback()
        logging.error(f"Error updating transaction: {e}", extra={"request_id": get_request_id(request)})
        return error_response(500, "Server Error", str(e))


@router.delete("/transactions/{transaction_id}", response_model=MessageResponse)
def delete_transaction(
    transaction_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if not TransactionRepository(db).delete_transaction(user_id, transaction_id):
        return error_response(404, TRANSACTION_NOT_FOUND)
    db.commit()
    return MessageResponse(msg="Transaction deleted successfully")
