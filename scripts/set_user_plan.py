"""
Script to move a user onto a subscription plan.
Run: python -m scripts.set_user_plan <user_id> <free|basic|premium> [monthly|yearly]
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.session import SessionLocal
from app.core.errors import CoreError
from app.services.plan_service import set_user_plan
from app.services.user_service import get_user
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def change_plan(user_id: int, plan_type: str, plan_duration: str = "monthly") -> bool:
    """Put an existing user on the given plan, starting now."""
    db = SessionLocal()
    try:
        user = get_user(db, user_id)
        logger.info(f"Found existing user: {user.username or user.first_name} (ID: {user.id})")

        subscription = set_user_plan(db, user.id, plan_type, plan_duration)
        logger.info(
            f"User {user.id} is now on {subscription.plan_type}/{subscription.plan_duration} "
            f"until {subscription.end_date}"
        )
        return True
    except CoreError as e:
        logger.error(f"Error updating plan for user {user_id}: {e.message}")
        return False
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(2)

    target_id = int(sys.argv[1])
    plan = sys.argv[2]
    duration = sys.argv[3] if len(sys.argv) > 3 else "monthly"

    if change_plan(target_id, plan, duration):
        print(f"\n[SUCCESS] User {target_id} is now on the {plan} plan ({duration})")
    else:
        print(f"\n[ERROR] Failed to change plan for user {target_id}")
        sys.exit(1)
