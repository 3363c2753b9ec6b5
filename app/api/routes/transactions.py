"""
Transaction history endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_user_id, get_db
from app.schemas.transaction import (
    CreateTransactionRequest,
    TransactionResponse,
    WithdrawalRequest,
)
from app.services.ledger_service import (
    create_transaction,
    list_user_transactions,
    request_withdrawal,
)

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


@router.post("/create", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create(
    request: CreateTransactionRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Submit a pending transaction. The balance is not touched."""
    transaction = create_transaction(
        db,
        user_id,
        request.type,
        request.amount,
        description=request.description,
        metadata=request.metadata,
    )
    return TransactionResponse.from_model(transaction)


@router.get("/get", response_model=List[TransactionResponse])
def get_user_transactions(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """The authenticated user's transactions, newest first."""
    return [TransactionResponse.from_model(t) for t in list_user_transactions(db, user_id)]


@router.post("/withdraw", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def withdraw(
    request: WithdrawalRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Debit the balance and open a pending withdrawal (409 if the balance is short)."""
    return TransactionResponse.from_model(request_withdrawal(db, user_id, request.amount))
