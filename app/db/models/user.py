from sqlalchemy import Column, BigInteger, Integer, String, Float, DateTime, CheckConstraint
from sqlalchemy.sql import func
from app.db.base import Base

# SQLite only autoincrements INTEGER PRIMARY KEY
UserId = BigInteger().with_variant(Integer(), "sqlite")


class User(Base):
    __tablename__ = "users"

    id = Column(UserId, primary_key=True, index=True)  # Telegram user id for mini app sign-ins
    username = Column(String, unique=True, nullable=True, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    role = Column(String, default="user", nullable=False)  # user | admin
    balance = Column(Float, default=0.0, nullable=False)
    referrer_id = Column(BigInteger, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_users_balance_non_negative"),
    )
