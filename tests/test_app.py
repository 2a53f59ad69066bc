"""App wiring: health check and error envelopes."""
from sqlalchemy import text

from sentquote import db
from sentquote.database_setup import get_existing_tables


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.get_json() == {"status": "healthy", "message": "SentQuote API is running!", "payments": False}


def test_health_reports_payments(client, payments):
    assert client.get("/api/health").get_json()["payments"] is True


def test_tables_created_on_startup(app):
    with app.app_context():
        assert {"users", "quotes", "quote_events", "followups"} <= set(get_existing_tables())


def test_foreign_keys_enforced(app):
    with app.app_context():
        assert db.session.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_unknown_route_is_json(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert "error" in r.get_json()


def test_wrong_method_is_json(client):
    r = client.delete("/api/health")
    assert r.status_code == 405
    assert "error" in r.get_json()
