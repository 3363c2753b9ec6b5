from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.db.base import Base
from app.db.models.user import UserId

class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    # Not unique: concurrent first lookups may each insert a default row
    user_id = Column(UserId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    plan_type = Column(String, default="free", nullable=False)  # free | basic | premium
    plan_duration = Column(String, default="monthly", nullable=False)  # monthly | yearly
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    status = Column(String, default="active", nullable=False)  # active | cancelled | expired

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
