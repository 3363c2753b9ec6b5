"""
Unit tests for plan service.
Tests default plan creation, plan changes and the plan summary.
"""
import pytest
from datetime import datetime, timedelta

from app.core.errors import ValidationError
from app.db.models.subscription import Subscription
from app.services.plan_service import (
    get_plan_multiplier_for_user,
    get_plan_summary,
    resolve_plan,
    set_user_plan,
)

NOW = datetime(2026, 10, 1, 12, 0, 0)


def test_resolve_plan_creates_default_free(db, test_user):
    """Test a user without a subscription gets a free 30-day plan."""
    subscription = resolve_plan(db, test_user.id, now=NOW)

    assert subscription.plan_type == "free"
    assert subscription.plan_duration == "monthly"
    assert subscription.status == "active"
    assert subscription.start_date == NOW
    assert subscription.end_date == NOW + timedelta(days=30)
    assert db.query(Subscription).filter(Subscription.user_id == test_user.id).count() == 1


def test_resolve_plan_default_is_idempotent(db, test_user):
    first = resolve_plan(db, test_user.id, now=NOW)
    second = resolve_plan(db, test_user.id, now=NOW + timedelta(hours=1))

    assert first.plan_type == second.plan_type == "free"
    assert first.id == second.id
    assert db.query(Subscription).filter(Subscription.user_id == test_user.id).count() == 1


def test_resolve_plan_tolerates_duplicate_rows(db, test_user):
    """Test duplicate default rows from a race never cause an error."""
    for _ in range(2):
        db.add(Subscription(
            user_id=test_user.id,
            plan_type="free",
            plan_duration="monthly",
            start_date=NOW,
            end_date=NOW + timedelta(days=30),
            status="active",
        ))
    db.commit()

    assert resolve_plan(db, test_user.id, now=NOW).plan_type == "free"


def test_resolve_plan_unknown_user_creates_row(db):
    """Test existence is not checked; an orphan free row is created."""
    assert resolve_plan(db, 424242, now=NOW).plan_type == "free"


def test_set_user_plan_replaces_current(db, test_user):
    resolve_plan(db, test_user.id, now=NOW)
    upgraded = set_user_plan(db, test_user.id, "premium", "yearly", now=NOW + timedelta(days=1))

    assert upgraded.plan_type == "premium"
    assert upgraded.end_date == upgraded.start_date + timedelta(days=365)
    assert resolve_plan(db, test_user.id).id == upgraded.id

    statuses = {
        s.plan_type: s.status
        for s in db.query(Subscription).filter(Subscription.user_id == test_user.id).all()
    }
    assert statuses == {"free": "cancelled", "premium": "active"}


def test_set_user_plan_normalizes_case(db, test_user):
    assert set_user_plan(db, test_user.id, "Basic", now=NOW).plan_type == "basic"


def test_set_user_plan_rejects_unknown_plan(db, test_user):
    with pytest.raises(ValidationError):
        set_user_plan(db, test_user.id, "elite", now=NOW)


def test_set_user_plan_rejects_unknown_duration(db, test_user):
    with pytest.raises(ValidationError):
        set_user_plan(db, test_user.id, "basic", "weekly", now=NOW)


def test_plan_multiplier_for_user(db, test_user):
    assert get_plan_multiplier_for_user(db, test_user.id, now=NOW) == 0.1
    set_user_plan(db, test_user.id, "basic", now=NOW + timedelta(minutes=1))
    assert get_plan_multiplier_for_user(db, test_user.id, now=NOW) == 0.8


def test_get_plan_summary(db, test_user):
    set_user_plan(db, test_user.id, "premium", now=NOW)
    summary = get_plan_summary(db, test_user.id)

    assert summary["planType"] == "premium"
    assert summary["planDuration"] == "monthly"
    assert summary["status"] == "active"
    assert summary["multiplier"] == 1.5
    assert summary["endDate"] - summary["startDate"] == timedelta(days=30)
