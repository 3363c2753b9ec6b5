"""
Subscription plan endpoints.
"""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_user_id, get_db
from app.schemas.plan import PlanResponse
from app.services.plan_service import get_plan_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Plan"])


@router.get("/get-plan", response_model=PlanResponse, status_code=status.HTTP_200_OK)
def get_plan(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Get the authenticated user's subscription plan.

    Users without a subscription get the default free plan created on the fly.
    """
    summary = get_plan_summary(db, user_id)
    logger.debug(f"Plan requested: user_id={user_id}, plan={summary['planType']}")
    return PlanResponse(**summary)
