"""
Balance ledger service.

Every balance change is a single conditional UPDATE:

    UPDATE users SET balance = balance + :delta
    WHERE id = :user_id AND balance + :delta >= 0

The database serializes concurrent updates of the same row, so accruals and
booster purchases for one user can never lose an update or push the balance
below zero. Transaction rows are append-only history next to the balance.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import (
    CoreError,
    InsufficientBalanceError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from app.db.models.transaction import (
    TERMINAL_STATUSES,
    TRANSACTION_STATUSES,
    TRANSACTION_TYPES,
    Transaction,
)
from app.db.models.user import User

logger = logging.getLogger(__name__)


def get_balance(db: Session, user_id: int) -> float:
    """Return the user's current balance; NotFoundError if the user is missing."""
    balance = db.query(User.balance).filter(User.id == user_id).scalar()
    if balance is None:
        raise NotFoundError(f"User {user_id} not found")
    return balance


def stage_delta(db: Session, user_id: int, delta: float) -> float:
    """Apply delta inside the caller's transaction. Does not commit."""
    updated = (
        db.query(User)
        .filter(User.id == user_id, User.balance + delta >= 0)
        .update(
            {User.balance: User.balance + delta, User.updated_at: func.now()},
            synchronize_session="fetch",
        )
    )
    if updated == 0:
        if db.query(User.id).filter(User.id == user_id).first() is None:
            raise NotFoundError(f"User {user_id} not found")
        raise InsufficientBalanceError(
            f"Balance change of {delta} would make balance negative for user {user_id}"
        )
    return get_balance(db, user_id)


def apply_delta(db: Session, user_id: int, delta: float) -> float:
    """
    Atomically add a signed delta to the user's balance and commit.

    Args:
        db: Database session
        user_id: User ID
        delta: Amount to add; negative values debit

    Returns:
        Balance after the change

    Raises:
        InsufficientBalanceError: balance + delta < 0; balance unchanged
        NotFoundError: no such user
        PersistenceError: storage failure; nothing committed
    """
    try:
        new_balance = stage_delta(db, user_id, delta)
        db.commit()
    except CoreError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Balance update failed for user {user_id}") from e
    return new_balance


def _validate_transaction(type: str, status: str, amount: float) -> None:
    if type not in TRANSACTION_TYPES:
        raise ValidationError(f"Invalid transaction type: {type}")
    if status not in TRANSACTION_STATUSES:
        raise ValidationError(f"Invalid transaction status: {status}")
    if amount is None:
        raise ValidationError("Transaction amount is required")


def _new_transaction(
    user_id: int,
    type: str,
    amount: float,
    status: str,
    description: Optional[str],
    tx_hash: Optional[str],
    metadata: Optional[Dict[str, Any]],
) -> Transaction:
    _validate_transaction(type, status, amount)
    return Transaction(
        user_id=user_id,
        type=type,
        amount=amount,
        status=status,
        description=description,
        tx_hash=tx_hash,
        metadata_json=json.dumps(metadata) if metadata is not None else None,
    )


def record_transaction(
    db: Session,
    user_id: int,
    type: str,
    amount: float,
    status: str = "pending",
    description: Optional[str] = None,
    tx_hash: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Transaction:
    """Append a history row without touching the balance."""
    transaction = _new_transaction(user_id, type, amount, status, description, tx_hash, metadata)
    try:
        db.add(transaction)
        db.commit()
        db.refresh(transaction)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Could not record transaction for user {user_id}") from e

    logger.info(
        f"Transaction recorded: id={transaction.id}, user_id={user_id}, "
        f"type={type}, amount={amount}, status={status}"
    )
    return transaction


def create_transaction(
    db: Session,
    user_id: int,
    type: str,
    amount: float,
    description: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Transaction:
    """User-submitted request; always starts pending and moves no money."""
    return record_transaction(
        db, user_id, type, amount, status="pending", description=description, metadata=metadata
    )


def _apply_with_history(
    db: Session,
    user_id: int,
    delta: float,
    transaction: Transaction,
) -> Transaction:
    """Balance change and its history row in one database transaction."""
    try:
        stage_delta(db, user_id, delta)
        db.add(transaction)
        db.commit()
        db.refresh(transaction)
    except CoreError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Ledger update failed for user {user_id}") from e
    return transaction


def add_passive_income(
    db: Session,
    user_id: int,
    amount: float,
    description: Optional[str] = None,
) -> Transaction:
    """Credit the balance and record a completed passive_income entry."""
    if amount <= 0:
        raise ValidationError("Passive income must be positive")
    transaction = _new_transaction(
        user_id, "passive_income", amount, "completed",
        description or "Passive income payment", None, None,
    )
    transaction = _apply_with_history(db, user_id, amount, transaction)
    logger.info(f"Passive income credited: user_id={user_id}, amount={amount}")
    return transaction


def request_withdrawal(db: Session, user_id: int, amount: float) -> Transaction:
    """
    Debit the balance and record a pending withdrawal.

    Raises:
        InsufficientBalanceError: amount exceeds the balance; nothing written
    """
    if amount <= 0:
        raise ValidationError("Withdrawal amount must be positive")
    transaction = _new_transaction(
        user_id, "withdrawal", -amount, "pending", "User withdrawal request", None, None,
    )
    transaction = _apply_with_history(db, user_id, -amount, transaction)
    logger.info(f"Withdrawal requested: user_id={user_id}, amount={amount}, id={transaction.id}")
    return transaction


def _finish_transaction(db: Session, transaction_id: str, new_status: str) -> Transaction:
    if new_status not in TERMINAL_STATUSES:
        raise ValidationError(f"Cannot finish a transaction as {new_status}")
    try:
        updated = (
            db.query(Transaction)
            .filter(Transaction.id == transaction_id, Transaction.status == "pending")
            .update(
                {Transaction.status: new_status, Transaction.updated_at: func.now()},
                synchronize_session="fetch",
            )
        )
        transaction = db.query(Transaction).filter(Transaction.id == transaction_id).first()
        if transaction is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        if updated == 0:
            raise InvalidTransitionError(
                f"Transaction {transaction_id} is already {transaction.status}"
            )

        # Failed withdrawals give the debited amount back
        if new_status == "failed" and transaction.type == "withdrawal" and transaction.amount < 0:
            stage_delta(db, transaction.user_id, -transaction.amount)

        db.commit()
        db.refresh(transaction)
    except CoreError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Could not update transaction {transaction_id}") from e

    logger.info(f"Transaction {transaction_id} -> {new_status}")
    return transaction


def complete_transaction(db: Session, transaction_id: str) -> Transaction:
    return _finish_transaction(db, transaction_id, "completed")


def fail_transaction(db: Session, transaction_id: str) -> Transaction:
    return _finish_transaction(db, transaction_id, "failed")


def list_user_transactions(db: Session, user_id: int) -> List[Transaction]:
    return (
        db.query(Transaction)
        .filter(Transaction.user_id == user_id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .all()
    )
