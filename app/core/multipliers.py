"""
Earnings multiplier configuration.

Single source of truth for plan-tier factors and the account-age factor.
"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional

# Supported plan tiers
SUPPORTED_PLANS: List[str] = [
    "free",
    "basic",
    "premium",
]

SUPPORTED_DURATIONS: List[str] = [
    "monthly",
    "yearly",
]

# Tier -> base earnings multiplier
PLAN_MULTIPLIERS: Dict[str, float] = {
    "free": 0.1,  # Free plan starts very low
    "basic": 0.8,
    "premium": 1.5,
}

DEFAULT_PLAN = "free"

# Account age bonus: 0.02 per week, capped
AGE_MULTIPLIER_PER_WEEK = 0.02
MAX_AGE_MULTIPLIER = 0.3
WEEK = timedelta(days=7)


def get_plan_multiplier(plan_type: Optional[str]) -> float:
    """
    Get the earnings multiplier for a plan tier.

    Args:
        plan_type: Plan tier (free, basic, premium); None or unknown falls back to free

    Returns:
        Multiplier applied to every synthetic data point
    """
    plan_type = plan_type.lower() if plan_type else DEFAULT_PLAN
    return PLAN_MULTIPLIERS.get(plan_type, PLAN_MULTIPLIERS[DEFAULT_PLAN])


def is_supported_plan(plan_type: Optional[str]) -> bool:
    return bool(plan_type) and plan_type.lower() in PLAN_MULTIPLIERS


def age_multiplier(created_at: datetime, now: datetime) -> float:
    """
    Time-based multiplier derived from account age.

    Grows by AGE_MULTIPLIER_PER_WEEK for every week since created_at and is
    capped at MAX_AGE_MULTIPLIER. Accounts created in the future count as
    zero weeks old.
    """
    age_in_weeks = max((now - created_at) / WEEK, 0.0)
    return min(age_in_weeks * AGE_MULTIPLIER_PER_WEEK, MAX_AGE_MULTIPLIER)
