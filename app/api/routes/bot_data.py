"""
Simulated bot performance endpoints.

Every point returned here has already been credited to the caller's balance.
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_user_id, get_db
from app.core.config import MAX_BOT_DATA_POINTS
from app.schemas.bot_data import DataPointResponse
from app.services.accrual_service import accrue, accrue_series
from app.services.signal_generator import SignalType

router = APIRouter(prefix="/api/bot-data", tags=["Bot data"])


@router.get("", response_model=List[DataPointResponse], status_code=status.HTTP_200_OK)
def get_bot_data(
    type: SignalType = Query(SignalType.RANDOM, description="random | mev | scalper"),
    count: int = Query(100, ge=1, le=MAX_BOT_DATA_POINTS),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Generate a series of one-second data points ending now."""
    points = accrue_series(db, user_id, signal_type=type, count=count)
    return [DataPointResponse(timestamp=p.timestamp, value=p.value) for p in points]


@router.get("/latest", response_model=DataPointResponse, status_code=status.HTTP_200_OK)
def get_latest_data_point(
    type: SignalType = Query(SignalType.RANDOM, description="random | mev | scalper"),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Generate the next live data point."""
    point = accrue(db, user_id, signal_type=type)
    return DataPointResponse(timestamp=point.timestamp, value=point.value)
