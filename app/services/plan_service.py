"""
Plan service for subscription lookups and tier changes.

Resolves the subscription that drives a user's earnings multiplier, creating
the default free plan on first access so callers always get a tier back.
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.clock import as_naive_utc
from app.core.config import DEFAULT_PLAN_DAYS
from app.core.errors import PersistenceError, ValidationError
from app.core.multipliers import (
    DEFAULT_PLAN,
    SUPPORTED_DURATIONS,
    get_plan_multiplier,
    is_supported_plan,
)
from app.db.models.subscription import Subscription

logger = logging.getLogger(__name__)

DURATION_DAYS = {
    "monthly": DEFAULT_PLAN_DAYS,
    "yearly": 365,
}


def _latest_subscription(db: Session, user_id: int) -> Optional[Subscription]:
    return (
        db.query(Subscription)
        .filter(Subscription.user_id == user_id)
        .order_by(Subscription.start_date.desc(), Subscription.id.desc())
        .first()
    )


def resolve_plan(db: Session, user_id: int, now: Optional[datetime] = None) -> Subscription:
    """
    Get the user's current subscription, creating a free one if none exists.

    Args:
        db: Database session
        user_id: User ID (existence is not checked)
        now: Clock override for the default subscription window

    Returns:
        Subscription row; never None

    Note:
        Two concurrent first calls may both insert a free row. That duplicate
        is harmless: later lookups pick the most recent one.
    """
    try:
        subscription = _latest_subscription(db, user_id)
        if subscription:
            return subscription

        start = as_naive_utc(now)
        subscription = Subscription(
            user_id=user_id,
            plan_type=DEFAULT_PLAN,
            plan_duration="monthly",
            start_date=start,
            end_date=start + timedelta(days=DEFAULT_PLAN_DAYS),
            status="active",
        )
        db.add(subscription)
        db.commit()
        db.refresh(subscription)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Could not resolve plan for user {user_id}") from e

    logger.info(f"Created default free subscription: user_id={user_id}")
    return subscription


def get_plan_multiplier_for_user(db: Session, user_id: int, now: Optional[datetime] = None) -> float:
    """Earnings factor for the user's resolved plan tier."""
    return get_plan_multiplier(resolve_plan(db, user_id, now=now).plan_type)


def set_user_plan(
    db: Session,
    user_id: int,
    plan_type: str,
    plan_duration: str = "monthly",
    now: Optional[datetime] = None,
) -> Subscription:
    """
    Start a new active subscription for the user.

    Earlier active rows are marked cancelled so the new row is the one
    resolve_plan returns.
    """
    if not is_supported_plan(plan_type):
        raise ValidationError(f"Unknown plan type: {plan_type}")
    if plan_duration not in SUPPORTED_DURATIONS:
        raise ValidationError(f"Unknown plan duration: {plan_duration}")

    start = as_naive_utc(now)
    try:
        (
            db.query(Subscription)
            .filter(Subscription.user_id == user_id, Subscription.status == "active")
            .update({Subscription.status: "cancelled"}, synchronize_session=False)
        )
        subscription = Subscription(
            user_id=user_id,
            plan_type=plan_type.lower(),
            plan_duration=plan_duration,
            start_date=start,
            end_date=start + timedelta(days=DURATION_DAYS[plan_duration]),
            status="active",
        )
        db.add(subscription)
        db.commit()
        db.refresh(subscription)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Could not change plan for user {user_id}") from e

    logger.info(
        f"Plan changed: user_id={user_id}, plan={subscription.plan_type}, "
        f"duration={plan_duration}, ends={subscription.end_date.isoformat()}"
    )
    return subscription


def get_plan_summary(db: Session, user_id: int) -> Dict:
    """
    Get plan data formatted for GET /api/get-plan response.
    """
    subscription = resolve_plan(db, user_id)
    return {
        "planType": subscription.plan_type,
        "planDuration": subscription.plan_duration,
        "startDate": subscription.start_date,
        "endDate": subscription.end_date,
        "status": subscription.status,
        "multiplier": get_plan_multiplier(subscription.plan_type),
    }
