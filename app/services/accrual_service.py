"""
Accrual service: turns synthetic signals into balance changes.

Each data point is

    value = base * plan_factor * age_factor * booster_factor

and is applied to the ledger as its own committed balance change. A series
is not transactional: if point n fails, points 0..n-1 stay applied.
"""
import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core import config
from app.core.clock import as_naive_utc, to_epoch_ms
from app.core.errors import NotFoundError
from app.core.multipliers import age_multiplier
from app.db.models.user import User
from app.services.booster_service import active_multiplier
from app.services.ledger_service import apply_delta
from app.services.plan_service import get_plan_multiplier_for_user
from app.services.signal_generator import (
    SignalType,
    generate_series,
    generate_value,
    parse_signal_type,
)

logger = logging.getLogger(__name__)


@dataclass
class DataPoint:
    timestamp: int  # Unix timestamp in milliseconds
    value: float  # Simulated profit/loss credited to the balance


def _user_created_at(db: Session, user_id: int) -> datetime:
    created_at = db.query(User.created_at).filter(User.id == user_id).scalar()
    if created_at is None:
        raise NotFoundError(f"User {user_id} not found")
    return created_at


def earnings_factor(
    db: Session,
    user_id: int,
    now: datetime,
    apply_boosters: Optional[bool] = None,
) -> float:
    """
    plan x age x boosters for one data point.

    Reading the booster factor spends a one-time booster if the user has one.
    """
    if apply_boosters is None:
        apply_boosters = config.APPLY_BOOSTERS_TO_ACCRUAL

    created_at = _user_created_at(db, user_id)
    plan_factor = get_plan_multiplier_for_user(db, user_id, now=now)
    age_factor = age_multiplier(created_at, now)
    booster_factor = active_multiplier(db, user_id, now=now) if apply_boosters else 1.0
    return plan_factor * age_factor * booster_factor


def accrue(
    db: Session,
    user_id: int,
    signal_type: SignalType = SignalType.RANDOM,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    apply_boosters: Optional[bool] = None,
) -> DataPoint:
    """
    Generate the latest data point for the user and credit it.

    Raises:
        NotFoundError: unknown user
        InsufficientBalanceError: a loss larger than the balance; nothing applied
        ValidationError: unknown signal type
    """
    now = as_naive_utc(now)
    signal_type = parse_signal_type(signal_type)

    base = generate_value(signal_type, min_value, max_value, rng=rng)
    value = base * earnings_factor(db, user_id, now, apply_boosters)
    balance = apply_delta(db, user_id, value)

    logger.debug(
        f"Accrued: user_id={user_id}, type={signal_type.value}, base={base:.6f}, "
        f"value={value:.6f}, balance={balance:.6f}"
    )
    return DataPoint(timestamp=to_epoch_ms(now), value=value)


def accrue_series(
    db: Session,
    user_id: int,
    signal_type: SignalType = SignalType.RANDOM,
    count: int = 100,
    start_time: Optional[int] = None,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    apply_boosters: Optional[bool] = None,
) -> List[DataPoint]:
    """
    Generate count data points, applying each one to the balance in turn.

    Args:
        db: Database session
        user_id: User ID
        signal_type: random, mev or scalper
        count: Number of points
        start_time: Epoch ms of the first point (default: now - count seconds)
        now: Clock override for plan, age and booster expiry checks
        rng: Random source for the signal
        apply_boosters: Override APPLY_BOOSTERS_TO_ACCRUAL

    Returns:
        Points in timestamp order, one second apart
    """
    now = as_naive_utc(now)
    signal_type = parse_signal_type(signal_type)
    _user_created_at(db, user_id)

    points: List[DataPoint] = []
    total = 0.0
    for timestamp, base in generate_series(signal_type, count, start_time=start_time, now=now, rng=rng):
        value = base * earnings_factor(db, user_id, now, apply_boosters)
        apply_delta(db, user_id, value)
        total += value
        points.append(DataPoint(timestamp=timestamp, value=value))

    logger.info(
        f"Accrued series: user_id={user_id}, type={signal_type.value}, "
        f"count={len(points)}, total={total:.6f}"
    )
    return points
