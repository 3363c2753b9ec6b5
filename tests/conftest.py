"""
Shared fixtures: in-memory SQLite database and user factory.
"""
import os
import tempfile
import threading

# Must be set before app modules read their config
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="galaxy_mev_logs_"))
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:TEST-BOT-TOKEN")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
import app.db.models  # noqa: F401
from app.db.models.user import User


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

NOW = datetime(2026, 10, 1, 12, 0, 0)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def session_factory():
    """Sessions bound to the shared in-memory database."""
    return TestSessionLocal


@pytest.fixture
def file_session_factory(tmp_path):
    """
    Sessions on a file-backed SQLite database, one connection per session.

    Used by the threaded tests: the in-memory engine shares a single
    connection, so it cannot show two writers racing.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'galaxy_mev_test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


def _run_concurrently(target, args_list):
    """Run target(*args) on one thread each, released together; return results in order."""
    barrier = threading.Barrier(len(args_list))
    results = [None] * len(args_list)
    errors = []

    def worker(index, args):
        barrier.wait()
        try:
            results[index] = target(*args)
        except Exception as e:  # collected and re-raised by the test thread
            errors.append(e)

    threads = [
        threading.Thread(target=worker, args=(i, args))
        for i, args in enumerate(args_list)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    if errors:
        raise errors[0]
    return results


@pytest.fixture
def run_concurrently():
    return _run_concurrently


@pytest.fixture
def make_user(db):
    """Factory for users with a given balance and account age."""
    counter = {"next_id": 1000}

    def _make_user(balance=0.0, created_at=None, username=None, user_id=None):
        counter["next_id"] += 1
        user = User(
            id=user_id or counter["next_id"],
            username=username,
            first_name="Test",
            balance=balance,
            created_at=created_at or NOW - timedelta(weeks=10),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def test_user(make_user):
    """A ten-week-old user with a balance of 100."""
    return make_user(balance=100.0)
