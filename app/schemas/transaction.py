"""
Pydantic schemas for transaction endpoints.
"""
import json
from datetime import datetime
from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field

from app.db.models.transaction import Transaction


class CreateTransactionRequest(BaseModel):
    """Request schema for submitting a transaction."""
    type: Literal["withdrawal", "deposit", "transfer"] = Field(..., description="Transaction type")
    amount: float = Field(..., description="Amount")
    description: Optional[str] = Field(None, max_length=500)
    metadata: Optional[Dict[str, Any]] = Field(None, description="Free-form details")

    class Config:
        json_schema_extra = {
            "example": {
                "type": "deposit",
                "amount": 25.0,
                "description": "TON top-up",
                "metadata": {"network": "ton"}
            }
        }


class WithdrawalRequest(BaseModel):
    amount: float = Field(..., gt=0, description="Amount to withdraw from the balance")


class TransactionResponse(BaseModel):
    id: str
    user_id: int = Field(..., alias="userId")
    type: str
    amount: float
    status: str
    description: Optional[str] = None
    tx_hash: Optional[str] = Field(None, alias="txHash")
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime = Field(..., alias="createdAt")

    class Config:
        populate_by_name = True

    @classmethod
    def from_model(cls, transaction: Transaction) -> "TransactionResponse":
        return cls(
            id=transaction.id,
            user_id=transaction.user_id,
            type=transaction.type,
            amount=transaction.amount,
            status=transaction.status,
            description=transaction.description,
            tx_hash=transaction.tx_hash,
            metadata=json.loads(transaction.metadata_json) if transaction.metadata_json else None,
            created_at=transaction.created_at,
        )
