from sqlalchemy import Column, String, Float, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.db.base import Base
from app.db.models.user import UserId
from app.db.models.ids import new_id


class BoosterActivation(Base):
    """
    A booster a user holds.

    type and multiplier are copied from the catalog at purchase time and are
    the values used for earnings; the catalog is only joined for display.
    """
    __tablename__ = "boosters"

    id = Column(String(15), primary_key=True, default=new_id)
    user_id = Column(UserId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    booster_id = Column(String, nullable=False)  # catalog id
    activated_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=True)  # only meaningful for duration boosters
    type = Column(String, nullable=False)  # oneTime | duration | permanent
    multiplier = Column(Float, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
