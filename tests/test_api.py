"""
Integration tests for the HTTP API.
Runs every endpoint through TestClient with Telegram initData sign-in,
plus the bearer-token strategy.
"""
import importlib
import json
import time
import pytest
from datetime import timedelta
from urllib.parse import urlencode
from fastapi.testclient import TestClient

from app.main import app
from app.core import config
from app.core.auth_dependency import get_db
from app.core.booster_catalog import AVAILABLE_BOOSTERS, PERMANENT
from app.core.clock import utcnow
from app.core.security import create_access_token, sign_init_data
from app.db.models.booster_activation import BoosterActivation
from app.db.models.user import User

main_module = importlib.import_module("app.main")

BOT_TOKEN = "123456:TEST-BOT-TOKEN"
TELEGRAM_ID = 42


def tma_header(user_id=TELEGRAM_ID, **extra):
    fields = {
        "auth_date": str(int(time.time())),
        "user": json.dumps({"id": user_id, "first_name": "Ada", "username": f"ada{user_id}"}),
    }
    fields.update(extra)
    fields["hash"] = sign_init_data(fields, BOT_TOKEN)
    return {"Authorization": f"tma {urlencode(fields)}"}


@pytest.fixture
def client(db, session_factory, monkeypatch):
    def override_get_db():
        """Override get_db dependency for testing."""
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr(config, "AUTH_STRATEGY", "telegram")
    monkeypatch.setattr(config, "TELEGRAM_BOT_TOKEN", BOT_TOKEN)
    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    """Headers for a registered Telegram user."""
    headers = tma_header()
    assert client.get("/api/auth/me", headers=headers).status_code == 200
    return headers


def set_balance(db, user_id, balance, created_at=None):
    values = {User.balance: balance}
    if created_at is not None:
        values[User.created_at] = created_at
    db.query(User).filter(User.id == user_id).update(values)
    db.commit()


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "Hello Galaxy MEV Telegram Mini App!"


def test_startup_prepares_database(monkeypatch):
    calls = []
    monkeypatch.setattr(main_module, "prepare_database", lambda: calls.append("prepared"))

    with TestClient(app) as started:
        assert calls == ["prepared"]
        assert started.get("/").status_code == 200


def test_system_health(client):
    response = client.get("/system/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["database"] == "connected"


# ---------------------------------------------------------------- auth

def test_me_requires_authorization(client):
    assert client.get("/api/auth/me").status_code == 401


def test_me_rejects_wrong_scheme(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer abc"})
    assert response.status_code == 401


def test_me_rejects_bad_signature(client):
    headers = tma_header()
    headers["Authorization"] = headers["Authorization"].replace("Ada", "Eve")
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_me_registers_telegram_user(client, db):
    response = client.get("/api/auth/me", headers=tma_header())

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["id"] == TELEGRAM_ID
    assert user["firstName"] == "Ada"
    assert user["username"] == "ada42"
    assert user["balance"] == 0
    assert user["referrerId"] is None
    assert db.query(User).count() == 1


def test_me_records_referrer(client, db):
    client.get("/api/auth/me", headers=tma_header(user_id=7))
    response = client.get("/api/auth/me", headers=tma_header(user_id=8, start_param="7"))

    assert response.json()["user"]["referrerId"] == 7


def test_self_referral_ignored(client):
    response = client.get("/api/auth/me", headers=tma_header(start_param=str(TELEGRAM_ID)))
    assert response.json()["user"]["referrerId"] is None


def test_update_profile(client, auth_headers):
    response = client.post(
        "/api/auth/update",
        json={"username": "new_name", "firstName": "Grace", "balance": 999},
        headers=auth_headers,
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["username"] == "new_name"
    assert user["firstName"] == "Grace"
    assert user["balance"] == 0


def test_update_profile_username_taken(client, auth_headers):
    client.get("/api/auth/me", headers=tma_header(user_id=7))
    response = client.post("/api/auth/update", json={"username": "ada7"}, headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


def test_update_profile_requires_authorization(client):
    response = client.post("/api/auth/update", json={"firstName": "Grace"})
    assert response.status_code == 401


def test_jwt_strategy(client, db, monkeypatch):
    monkeypatch.setattr(config, "AUTH_STRATEGY", "jwt")
    db.add(User(id=1001, username="bob", balance=3.5))
    db.commit()

    token = create_access_token({"sub": "1001"})
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["user"]["balance"] == 3.5

    # initData is not accepted under the jwt strategy
    assert client.get("/api/auth/me", headers=tma_header()).status_code == 401

    unknown = create_access_token({"sub": "5555"})
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {unknown}"})
    assert response.status_code == 401


def test_unsupported_strategy(client, monkeypatch):
    monkeypatch.setattr(config, "AUTH_STRATEGY", "cookie")
    assert client.get("/api/auth/me", headers=tma_header()).status_code == 500


# ---------------------------------------------------------------- plan

def test_get_plan_defaults_to_free(client, auth_headers):
    response = client.get("/api/get-plan", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["planType"] == "free"
    assert data["planDuration"] == "monthly"
    assert data["status"] == "active"
    assert data["multiplier"] == 0.1


# ---------------------------------------------------------------- bot data

def test_bot_data_series(client, db, auth_headers):
    set_balance(db, TELEGRAM_ID, 5.0, created_at=utcnow() - timedelta(weeks=10))

    response = client.get("/api/bot-data?type=random&count=5", headers=auth_headers)

    assert response.status_code == 200
    points = response.json()
    assert len(points) == 5
    assert all(b["timestamp"] - a["timestamp"] == 1000 for a, b in zip(points, points[1:]))

    balance = client.get("/api/auth/me", headers=auth_headers).json()["user"]["balance"]
    assert balance == pytest.approx(5.0 + sum(p["value"] for p in points))


def test_bot_data_default_count(client, auth_headers):
    response = client.get("/api/bot-data", headers=auth_headers)
    assert response.status_code == 200
    assert len(response.json()) == 100


def test_bot_data_validates_query(client, auth_headers):
    assert client.get("/api/bot-data?count=0", headers=auth_headers).status_code == 422
    assert client.get("/api/bot-data?count=501", headers=auth_headers).status_code == 422
    assert client.get("/api/bot-data?type=arbitrage", headers=auth_headers).status_code == 422


def test_bot_data_requires_auth(client):
    assert client.get("/api/bot-data").status_code == 401


def test_latest_data_point(client, auth_headers):
    response = client.get("/api/bot-data/latest?type=mev", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert set(data) == {"timestamp", "value"}
    assert abs(data["timestamp"] - time.time() * 1000) < 60_000


# ---------------------------------------------------------------- boosters

def test_list_boosters(client):
    response = client.get("/api/boosters")

    assert response.status_code == 200
    boosters = response.json()
    assert len(boosters) == len(AVAILABLE_BOOSTERS)
    hour = next(b for b in boosters if b["id"] == "hour-boost")
    assert hour == {
        "id": "hour-boost",
        "name": "Hour Power",
        "description": "1.5x multiplier for 1 hour",
        "multiplier": 1.5,
        "duration": 3600000,
        "price": 250,
        "type": "duration",
    }


def test_purchase_insufficient_balance(client, db, auth_headers):
    set_balance(db, TELEGRAM_ID, 100)

    response = client.post("/api/boosters/purchase", json={"boosterId": "day-boost"}, headers=auth_headers)

    assert response.status_code == 400
    assert client.get("/api/boosters/active", headers=auth_headers).json() == []


def test_purchase_with_balance(client, db, auth_headers):
    set_balance(db, TELEGRAM_ID, 1000)

    response = client.post("/api/boosters/purchase", json={"boosterId": "day-boost"}, headers=auth_headers)

    assert response.status_code == 201
    assert response.json() == {"success": True}
    me = client.get("/api/auth/me", headers=auth_headers).json()
    assert me["user"]["balance"] == 500


def test_purchase_with_external_payment(client, auth_headers):
    response = client.post(
        "/api/boosters/purchase",
        json={"boosterId": "permanent-boost", "useExternalPayment": True},
        headers=auth_headers,
    )
    assert response.status_code == 201

    [active] = client.get("/api/boosters/active", headers=auth_headers).json()
    assert active["id"] == "permanent-boost"
    assert active["userId"] == TELEGRAM_ID
    assert active["expiresAt"] is None
    assert active["activatedAt"] > 0


def test_purchase_unknown_booster(client, auth_headers):
    response = client.post(
        "/api/boosters/purchase",
        json={"boosterId": "no-such-boost", "useExternalPayment": True},
        headers=auth_headers,
    )
    assert response.status_code == 400


def test_purchase_requires_booster_id(client, auth_headers):
    response = client.post("/api/boosters/purchase", json={}, headers=auth_headers)
    assert response.status_code == 422


def test_active_boosters_unknown_catalog_reference(client, db, auth_headers):
    db.add(BoosterActivation(
        user_id=TELEGRAM_ID,
        booster_id="retired-boost",
        activated_at=utcnow(),
        type=PERMANENT,
        multiplier=1.5,
    ))
    db.commit()

    response = client.get("/api/boosters/active", headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "UNKNOWN_CATALOG_REFERENCE"


# ---------------------------------------------------------------- transactions

def test_create_transaction(client, auth_headers):
    response = client.post(
        "/api/transactions/create",
        json={"type": "deposit", "amount": 25, "description": "TON top-up", "metadata": {"network": "ton"}},
        headers=auth_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["userId"] == TELEGRAM_ID
    assert data["metadata"] == {"network": "ton"}
    # Submitting a transaction moves no money
    me = client.get("/api/auth/me", headers=auth_headers).json()
    assert me["user"]["balance"] == 0


def test_create_transaction_rejects_internal_type(client, auth_headers):
    response = client.post(
        "/api/transactions/create",
        json={"type": "passive_income", "amount": 25},
        headers=auth_headers,
    )
    assert response.status_code == 422


def test_list_transactions(client, auth_headers):
    for amount in (1, 2):
        client.post("/api/transactions/create", json={"type": "deposit", "amount": amount}, headers=auth_headers)

    response = client.get("/api/transactions/get", headers=auth_headers)

    assert response.status_code == 200
    assert sorted(t["amount"] for t in response.json()) == [1, 2]


def test_list_transactions_only_own(client, auth_headers):
    client.post("/api/transactions/create", json={"type": "deposit", "amount": 1}, headers=auth_headers)
    other = tma_header(user_id=99)
    assert client.get("/api/transactions/get", headers=other).json() == []


def test_withdraw(client, db, auth_headers):
    set_balance(db, TELEGRAM_ID, 100)

    response = client.post("/api/transactions/withdraw", json={"amount": 30}, headers=auth_headers)

    assert response.status_code == 201
    assert response.json()["amount"] == -30
    assert response.json()["type"] == "withdrawal"
    me = client.get("/api/auth/me", headers=auth_headers).json()
    assert me["user"]["balance"] == 70


def test_withdraw_insufficient_balance(client, db, auth_headers):
    set_balance(db, TELEGRAM_ID, 10)

    response = client.post("/api/transactions/withdraw", json={"amount": 30}, headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INSUFFICIENT_BALANCE"
    assert client.get("/api/transactions/get", headers=auth_headers).json() == []


def test_withdraw_rejects_non_positive(client, auth_headers):
    response = client.post("/api/transactions/withdraw", json={"amount": 0}, headers=auth_headers)
    assert response.status_code == 422
