"""
Shared pytest fixtures for the SentQuote test suite.

Every test gets its own app bound to a fresh SQLite file under tmp_path.
"""
import pytest

from sentquote import create_app, db
from sentquote.config import TestingConfig
from sentquote.errors import PaymentSetupError
from sentquote.payments import StripeGateway


# ── App / client ──────────────────────────────────────────────────────────────

@pytest.fixture
def app(tmp_path):
    class Config(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'sentquote-test.db'}"

    app = create_app(Config)
    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, email="owner@example.com", password="s3cret-pass", business_name="Acme Roofing"):
    r = client.post("/api/auth/register", json={
        "email": email, "password": password, "businessName": business_name,
    })
    assert r.status_code == 201, r.get_json()
    return r.get_json()


@pytest.fixture
def owner(client):
    """Registered user: dict with token, user and ready-made auth headers."""
    data = register(client)
    data["headers"] = {"Authorization": f"Bearer {data['token']}"}
    return data


@pytest.fixture
def other_owner(client):
    data = register(client, email="someone-else@example.com", business_name="Other Co")
    data["headers"] = {"Authorization": f"Bearer {data['token']}"}
    return data


# ── Quote helpers ─────────────────────────────────────────────────────────────

SAMPLE_LINE_ITEMS = [
    {"description": "Shingle replacement", "quantity": 2, "unitPrice": 50.00},
]


def quote_payload(**overrides):
    payload = {
        "clientName": "Jane Client",
        "clientEmail": "jane@client.test",
        "title": "Roof repair",
        "description": "Replace damaged shingles",
        "lineItems": SAMPLE_LINE_ITEMS,
        "taxRate": 10,
    }
    payload.update(overrides)
    return payload


def create_quote(client, headers, **overrides):
    r = client.post("/api/quotes", json=quote_payload(**overrides), headers=headers)
    assert r.status_code == 201, r.get_json()
    return r.get_json()["quote"]


def send_quote(client, headers, quote_id):
    r = client.post(f"/api/quotes/{quote_id}/send", headers=headers)
    assert r.status_code == 200, r.get_json()
    return r.get_json()["quote"]


@pytest.fixture
def sent_quote(client, owner):
    quote = create_quote(client, owner["headers"])
    return send_quote(client, owner["headers"], quote["id"])


# ── Payments ──────────────────────────────────────────────────────────────────

class FakeGateway(StripeGateway):
    """Records checkout requests instead of calling Stripe."""

    def __init__(self, webhook_secret=None):
        super().__init__(secret_key="sk_test_fake", webhook_secret=webhook_secret)
        self.checkouts = []
        self.subscriptions = []
        self.fail = False

    def create_checkout_session(self, **kwargs):
        if self.fail:
            raise PaymentSetupError()
        self.checkouts.append(kwargs)
        return "https://checkout.stripe.test/c/pay_123"

    def create_subscription_checkout(self, **kwargs):
        if self.fail:
            raise PaymentSetupError("Checkout failed")
        self.subscriptions.append(kwargs)
        return "https://checkout.stripe.test/c/sub_123"

    def create_connect_onboarding(self, refresh_url, return_url):
        if self.fail:
            raise PaymentSetupError("Failed to setup Stripe")
        return "acct_test123", "https://connect.stripe.test/setup/acct_test123"


@pytest.fixture
def payments(app):
    gateway = FakeGateway()
    app.extensions["payments"] = gateway
    return gateway
