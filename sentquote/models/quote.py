from sentquote import db
from datetime import datetime
import uuid


QUOTE_STATUSES = ('draft', 'sent', 'accepted', 'paid')


class Quote(db.Model):
    __tablename__ = 'quotes'
    __table_args__ = (
        db.Index('idx_quotes_user', 'user_id'),
        db.Index('idx_quotes_slug', 'slug'),
        db.Index('idx_quotes_status', 'status'),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)
    slug = db.Column(db.String(16), unique=True, nullable=False)

    client_name = db.Column(db.String(255), nullable=False)
    client_email = db.Column(db.String(255), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, default='')
    notes = db.Column(db.Text, default='')
    line_items = db.Column(db.JSON, nullable=False, default=list)

    # Money columns hold integer minor units (cents)
    subtotal = db.Column(db.Integer, nullable=False, default=0)
    tax_rate = db.Column(db.Float, default=0)
    tax_amount = db.Column(db.Integer, default=0)
    total = db.Column(db.Integer, nullable=False, default=0)
    currency = db.Column(db.String(3), default='usd')
    deposit_percent = db.Column(db.Integer, default=0)
    deposit_amount = db.Column(db.Integer, default=0)
    valid_until = db.Column(db.DateTime)

    status = db.Column(db.String(20), default='draft', nullable=False)
    accepted_at = db.Column(db.DateTime)
    paid_at = db.Column(db.DateTime)
    paid_amount = db.Column(db.Integer, default=0)
    stripe_payment_intent = db.Column(db.String(255))

    view_count = db.Column(db.Integer, default=0)
    first_viewed_at = db.Column(db.DateTime)
    last_viewed_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    events = db.relationship('QuoteEvent', backref='quote', lazy=True, cascade='all, delete-orphan')
    followups = db.relationship('Followup', backref='quote', lazy=True, cascade='all, delete-orphan')


class QuoteEvent(db.Model):
    """Append-only audit entry for a quote."""
    __tablename__ = 'quote_events'
    __table_args__ = (
        db.Index('idx_events_quote', 'quote_id'),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    quote_id = db.Column(db.String(36), db.ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False)
    event_type = db.Column(db.String(50), nullable=False)  # 'sent', 'viewed', 'accepted', 'paid'
    # "metadata" is reserved on declarative models
    event_metadata = db.Column('metadata', db.JSON, default=dict)
    ip_address = db.Column(db.String(255))
    user_agent = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class Followup(db.Model):
    """A scheduled reminder. Stored only; nothing dispatches these yet."""
    __tablename__ = 'followups'
    __table_args__ = (
        db.Index('idx_followups_quote', 'quote_id'),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    quote_id = db.Column(db.String(36), db.ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False)
    scheduled_at = db.Column(db.DateTime, nullable=False)
    sent_at = db.Column(db.DateTime)
    message = db.Column(db.Text)
    status = db.Column(db.String(20), default='pending', nullable=False)  # pending/sent/cancelled
