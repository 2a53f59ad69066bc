"""QuoteLifecycle against in-memory stores, with a pinned clock."""
from datetime import datetime

import pytest

from sentquote.errors import Conflict, NotFound, ServerError, ValidationError
from sentquote.models import QUOTE_STATUSES
from sentquote.services import lifecycle as lifecycle_module
from sentquote.services.lifecycle import QuoteLifecycle


NOW = datetime(2024, 1, 15, 9, 30)


# ── In-memory stores ──────────────────────────────────────────────────────────

class MemoryQuotes:
    def __init__(self):
        self.rows = {}

    def add(self, quote):
        self.rows[quote.id] = quote
        return quote

    def get(self, quote_id):
        return self.rows.get(quote_id)

    def get_owned(self, quote_id, user_id):
        quote = self.rows.get(quote_id)
        return quote if quote and quote.user_id == user_id else None

    def slug_exists(self, slug):
        return any(q.slug == slug for q in self.rows.values())

    def list_for_owner(self, user_id):
        return sorted((q for q in self.rows.values() if q.user_id == user_id),
                      key=lambda q: q.created_at, reverse=True)

    def delete(self, quote):
        self.rows.pop(quote.id, None)


class MemoryEvents:
    def __init__(self):
        self.rows = []

    def record(self, quote_id, event_type, metadata=None, ip_address=None, user_agent=None):
        self.rows.append({"quote_id": quote_id, "event_type": event_type, "metadata": metadata or {}})

    def recent_for_quote(self, quote_id, limit=50):
        return [e for e in reversed(self.rows) if e["quote_id"] == quote_id][:limit]


class MemoryFollowups:
    def __init__(self):
        self.rows = []

    def schedule(self, quote_id, scheduled_at, message):
        self.rows.append({"quote_id": quote_id, "scheduled_at": scheduled_at,
                          "message": message, "status": "pending"})

    def cancel_pending(self, quote_id):
        count = 0
        for row in self.rows:
            if row["quote_id"] == quote_id and row["status"] == "pending":
                row["status"] = "cancelled"
                count += 1
        return count


class MemoryStores:
    def __init__(self):
        self.quotes = MemoryQuotes()
        self.events = MemoryEvents()
        self.followups = MemoryFollowups()
        self.commits = 0

    def commit(self):
        self.commits += 1


@pytest.fixture
def stores():
    return MemoryStores()


@pytest.fixture
def lifecycle(stores):
    return QuoteLifecycle(stores, now=lambda: NOW)


def quote_data(**overrides):
    data = {
        "client_name": "Jane Client",
        "client_email": "jane@client.test",
        "title": "Roof repair",
        "line_items": [{"description": "Shingles", "quantity": 2, "unitPrice": 50}],
        "tax_rate": 10,
    }
    data.update(overrides)
    return data


# ═══════════════════════════════════════════════════════════════════════════════
# CREATE / UPDATE
# ═══════════════════════════════════════════════════════════════════════════════

class TestCreate:

    def test_draft_with_money(self, lifecycle, stores):
        quote = lifecycle.create("user-1", quote_data(deposit_percent=50, valid_days=30))
        assert quote.status == "draft"
        assert (quote.subtotal, quote.tax_amount, quote.total) == (10000, 1000, 11000)
        assert quote.deposit_amount == 5500
        assert quote.valid_until == datetime(2024, 2, 14, 9, 30)
        assert quote.created_at == NOW
        assert quote.description == ""
        assert stores.quotes.get(quote.id) is quote
        assert stores.commits == 1

    def test_requires_line_items(self, lifecycle):
        with pytest.raises(ValidationError):
            lifecycle.create("user-1", quote_data(line_items=[]))

    def test_requires_client_name(self, lifecycle):
        with pytest.raises(ValidationError):
            lifecycle.create("user-1", quote_data(client_name=""))

    def test_slug_collision_retries(self, lifecycle, stores, monkeypatch):
        first = lifecycle.create("user-1", quote_data())
        candidates = iter([first.slug, first.slug, "freshslg"])
        monkeypatch.setattr(lifecycle_module, "generate_slug", lambda: next(candidates))
        assert lifecycle.create("user-1", quote_data()).slug == "freshslg"

    def test_slug_collision_gives_up(self, lifecycle, monkeypatch):
        first = lifecycle.create("user-1", quote_data())
        monkeypatch.setattr(lifecycle_module, "generate_slug", lambda: first.slug)
        with pytest.raises(ServerError):
            lifecycle.create("user-1", quote_data())


class TestUpdate:

    def test_untouched_keys_survive(self, lifecycle):
        quote = lifecycle.create("user-1", quote_data(notes="Bring ladders"))
        lifecycle.update(quote.id, "user-1", {"title": "Roof and gutters"})
        assert quote.title == "Roof and gutters"
        assert quote.notes == "Bring ladders"
        assert quote.total == 11000

    def test_money_recomputed_with_stored_inputs(self, lifecycle):
        quote = lifecycle.create("user-1", quote_data(deposit_percent=10))
        lifecycle.update(quote.id, "user-1", {"line_items": [{"quantity": 1, "unitPrice": 200}]})
        assert quote.subtotal == 20000
        assert quote.tax_amount == 2000
        assert quote.deposit_amount == 2200

    def test_null_notes_become_empty(self, lifecycle):
        quote = lifecycle.create("user-1", quote_data(notes="x"))
        lifecycle.update(quote.id, "user-1", {"notes": None})
        assert quote.notes == ""

    def test_other_owner(self, lifecycle):
        quote = lifecycle.create("user-1", quote_data())
        with pytest.raises(NotFound):
            lifecycle.update(quote.id, "user-2", {"title": "x"})


# ═══════════════════════════════════════════════════════════════════════════════
# TRANSITIONS
# ═══════════════════════════════════════════════════════════════════════════════

class TestTransitions:

    def test_send_schedules_followups(self, lifecycle, stores):
        quote = lifecycle.create("user-1", quote_data())
        lifecycle.send(quote.id, "user-1")
        assert quote.status == "sent"
        assert [f["scheduled_at"] for f in stores.followups.rows] == [
            datetime(2024, 1, 18, 9, 30), datetime(2024, 1, 22, 9, 30),
        ]
        assert [e["event_type"] for e in stores.events.rows] == ["sent"]

    def test_send_paid_quote_conflicts(self, lifecycle):
        quote = lifecycle.create("user-1", quote_data())
        lifecycle.send(quote.id, "user-1")
        lifecycle.mark_paid(quote, 11000, "pi_1")
        with pytest.raises(Conflict):
            lifecycle.send(quote.id, "user-1")

    def test_accept_cancels_followups(self, lifecycle, stores):
        quote = lifecycle.create("user-1", quote_data())
        lifecycle.send(quote.id, "user-1")
        lifecycle.accept(quote)
        assert quote.status == "accepted"
        assert quote.accepted_at == NOW
        assert {f["status"] for f in stores.followups.rows} == {"cancelled"}

    def test_mark_paid_records_amount(self, lifecycle, stores):
        quote = lifecycle.create("user-1", quote_data(deposit_percent=25))
        lifecycle.send(quote.id, "user-1")
        lifecycle.mark_paid(quote, 2750, "pi_deposit")
        assert quote.status == "paid"
        assert quote.paid_amount == 2750
        assert quote.paid_at == NOW
        assert stores.events.rows[-1] == {
            "quote_id": quote.id, "event_type": "paid",
            "metadata": {"amount": 2750, "paymentIntent": "pi_deposit"},
        }

    def test_get_and_delete(self, lifecycle):
        quote = lifecycle.create("user-1", quote_data())
        lifecycle.send(quote.id, "user-1")
        found, events = lifecycle.get(quote.id, "user-1")
        assert found is quote
        assert len(events) == 1
        lifecycle.delete(quote.id, "user-1")
        assert lifecycle.list_quotes("user-1") == []

    def test_status_rank_follows_lifecycle(self):
        assert list(lifecycle_module.STATUS_ORDER) == list(QUOTE_STATUSES)
        assert [lifecycle_module.STATUS_ORDER[s] for s in ("draft", "sent", "accepted", "paid")] == [0, 1, 2, 3]
