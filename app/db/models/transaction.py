from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Text, Index
from sqlalchemy.sql import func
from app.db.base import Base
from app.db.models.user import UserId
from app.db.models.ids import new_id

TRANSACTION_TYPES = (
    "withdrawal",
    "deposit",
    "transfer",
    "passive_income",
    "referral_bonus",
    "subscription_payment",
)
TRANSACTION_STATUSES = ("pending", "completed", "failed")
TERMINAL_STATUSES = ("completed", "failed")


class Transaction(Base):
    """
    Append-only balance history entry.

    Rows are never edited except for the single status transition out of
    "pending". Withdrawals carry a negative amount.
    """
    __tablename__ = "transactions"

    id = Column(String(15), primary_key=True, default=new_id)
    user_id = Column(UserId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    status = Column(String, default="pending", nullable=False)
    description = Column(String, nullable=True)
    tx_hash = Column(String, nullable=True)
    metadata_json = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_transactions_user_created", "user_id", "created_at"),
    )
