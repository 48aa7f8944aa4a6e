"""
Integration tests for POST /api/create-payment-intent and GET /api/pricing-plans.
"""
import pytest

from resume_enhancer.main import app
from resume_enhancer.api.dependencies import get_billing_client
from resume_enhancer.core.exceptions import BillingError
from resume_enhancer.db.models.payment import Payment, PAYMENT_PENDING
from resume_enhancer.db.models.profile import Profile

from conftest import FakeBillingClient


@pytest.fixture
def billing():
    fake = FakeBillingClient()
    app.dependency_overrides[get_billing_client] = lambda: fake
    return fake


def test_valid_plan_creates_one_pending_payment(client, billing, profile, db_session):
    response = client.post("/api/create-payment-intent", json={"plan": "job_hunt_2w", "userId": profile.id})

    assert response.status_code == 200
    assert response.json() == {"clientSecret": "pi_test_1_secret_abc", "paymentIntentId": "pi_test_1"}

    payments = db_session.query(Payment).all()
    assert len(payments) == 1
    payment = payments[0]
    assert payment.status == PAYMENT_PENDING
    assert payment.stripe_payment_intent_id == "pi_test_1"
    assert payment.amount == 999
    assert payment.currency == "usd"
    assert payment.subscription_type == "job_hunt_2w"
    assert payment.user_id == profile.id


def test_intent_carries_plan_metadata(client, billing, profile):
    client.post("/api/create-payment-intent", json={"plan": "premium_1m", "userId": profile.id})

    intent = billing.intents[0]
    assert intent["amount"] == 1999
    assert intent["customer"] == "cus_test_1"
    assert intent["metadata"] == {
        "user_id": profile.id,
        "subscription_type": "premium_1m",
        "plan_name": "1-Month Premium",
    }


def test_customer_created_once_and_reused(client, billing, profile, db_session):
    client.post("/api/create-payment-intent", json={"plan": "job_hunt_2w", "userId": profile.id})
    client.post("/api/create-payment-intent", json={"plan": "premium_1m", "userId": profile.id})

    assert billing.customers == [{"email": "test@example.com", "name": "Test User"}]
    db_session.expire_all()
    assert db_session.get(Profile, profile.id).stripe_customer_id == "cus_test_1"
    assert billing.intents[1]["customer"] == "cus_test_1"
    assert db_session.query(Payment).count() == 2


def test_invalid_plan_writes_nothing(client, billing, profile, db_session):
    response = client.post("/api/create-payment-intent", json={"plan": "lifetime", "userId": profile.id})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid plan"}
    assert billing.intents == []
    assert db_session.query(Payment).count() == 0


@pytest.mark.parametrize("body", [{"plan": "job_hunt_2w"}, {"userId": "abc"}, {}])
def test_missing_fields(client, billing, body, db_session):
    response = client.post("/api/create-payment-intent", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing plan or userId"}
    assert db_session.query(Payment).count() == 0


def test_unknown_user(client, billing):
    response = client.post("/api/create-payment-intent", json={"plan": "job_hunt_2w", "userId": "missing"})

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_stripe_failure_is_generic_500(client, profile, db_session):
    failing = FakeBillingClient(fail=BillingError("card_declined: secret detail"))
    app.dependency_overrides[get_billing_client] = lambda: failing

    response = client.post("/api/create-payment-intent", json={"plan": "job_hunt_2w", "userId": profile.id})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create payment intent"}
    assert db_session.query(Payment).count() == 0


def test_pricing_plans_listing(client):
    response = client.get("/api/pricing-plans")

    assert response.status_code == 200
    data = response.json()
    assert data["publishableKey"] == "pk_test_123"
    plans = {plan["key"]: plan for plan in data["plans"]}
    assert set(plans) == {"job_hunt_2w", "premium_1m", "job_seeker_3m"}
    assert plans["job_hunt_2w"]["displayPrice"] == "$9.99"
    assert plans["job_seeker_3m"]["durationDays"] == 90
    assert plans["premium_1m"]["features"] == {"resumes": 25, "ats_analyses": 50, "edit_enabled": True}
