"""Repositories over the SQLAlchemy session.

Services receive a ``Stores`` bundle so the lifecycle logic can run against
in-memory fakes in tests. Stores only stage changes; ``Stores.commit`` ends
the unit of work.
"""
from datetime import datetime

from sqlalchemy import func

from sentquote.models import User, Quote, QuoteEvent, Followup


class UserStore:
    def __init__(self, session):
        self.session = session

    def get(self, user_id):
        return self.session.get(User, user_id)

    def get_by_email(self, email):
        return self.session.query(User).filter_by(email=email).first()

    def get_by_stripe_account(self, account_id):
        return self.session.query(User).filter_by(stripe_account_id=account_id).first()

    def add(self, user):
        self.session.add(user)
        self.session.flush()
        return user


class QuoteStore:
    def __init__(self, session):
        self.session = session

    def add(self, quote):
        self.session.add(quote)
        self.session.flush()
        return quote

    def get(self, quote_id):
        return self.session.get(Quote, quote_id)

    def get_owned(self, quote_id, user_id):
        return self.session.query(Quote).filter_by(id=quote_id, user_id=user_id).first()

    def get_by_slug(self, slug, statuses=None, exclude_status=None):
        query = self.session.query(Quote).filter(Quote.slug == slug)
        if statuses:
            query = query.filter(Quote.status.in_(statuses))
        if exclude_status:
            query = query.filter(Quote.status != exclude_status)
        return query.first()

    def slug_exists(self, slug):
        return self.session.query(Quote.id).filter_by(slug=slug).first() is not None

    def list_for_owner(self, user_id):
        return (
            self.session.query(Quote)
            .filter(Quote.user_id == user_id)
            .order_by(Quote.created_at.desc())
            .all()
        )

    def record_view(self, quote_id, now):
        """Count a view in one UPDATE so concurrent viewers never lose an increment."""
        return (
            self.session.query(Quote)
            .filter(Quote.id == quote_id)
            .update({
                Quote.view_count: func.coalesce(Quote.view_count, 0) + 1,
                Quote.first_viewed_at: func.coalesce(Quote.first_viewed_at, now),
                Quote.last_viewed_at: now,
            }, synchronize_session=False)
        )

    def delete(self, quote):
        self.session.delete(quote)

    def count_for_owner(self, user_id, statuses=None):
        query = self.session.query(func.count(Quote.id)).filter(Quote.user_id == user_id)
        if statuses:
            query = query.filter(Quote.status.in_(statuses))
        return query.scalar() or 0

    def sum_for_owner(self, user_id, column, statuses=None):
        query = self.session.query(func.coalesce(func.sum(column), 0)).filter(Quote.user_id == user_id)
        if statuses:
            query = query.filter(Quote.status.in_(statuses))
        return int(query.scalar() or 0)


class EventStore:
    def __init__(self, session):
        self.session = session

    def record(self, quote_id, event_type, metadata=None, ip_address=None, user_agent=None):
        event = QuoteEvent(
            quote_id=quote_id,
            event_type=event_type,
            event_metadata=metadata or {},
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=datetime.utcnow(),
        )
        self.session.add(event)
        return event

    def recent_for_quote(self, quote_id, limit=50):
        return (
            self.session.query(QuoteEvent)
            .filter(QuoteEvent.quote_id == quote_id)
            .order_by(QuoteEvent.created_at.desc(), QuoteEvent.id.desc())
            .limit(limit)
            .all()
        )

    def recent_for_owner(self, user_id, limit=20):
        """Events across an owner's quotes as (event, title, client_name) rows."""
        return (
            self.session.query(QuoteEvent, Quote.title, Quote.client_name)
            .join(Quote, QuoteEvent.quote_id == Quote.id)
            .filter(Quote.user_id == user_id)
            .order_by(QuoteEvent.created_at.desc(), QuoteEvent.id.desc())
            .limit(limit)
            .all()
        )


class FollowupStore:
    def __init__(self, session):
        self.session = session

    def schedule(self, quote_id, scheduled_at, message):
        followup = Followup(
            quote_id=quote_id,
            scheduled_at=scheduled_at,
            message=message,
            status='pending',
        )
        self.session.add(followup)
        return followup

    def cancel_pending(self, quote_id):
        return (
            self.session.query(Followup)
            .filter(Followup.quote_id == quote_id, Followup.status == 'pending')
            .update({'status': 'cancelled'}, synchronize_session='fetch')
        )


class Stores:
    """One unit of work: the four stores sharing a session."""

    def __init__(self, session):
        self.session = session
        self.users = UserStore(session)
        self.quotes = QuoteStore(session)
        self.events = EventStore(session)
        self.followups = FollowupStore(session)

    def commit(self):
        self.session.commit()
