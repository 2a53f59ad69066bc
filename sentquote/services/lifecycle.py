"""Quote lifecycle: draft -> sent -> accepted -> paid."""
import logging
import secrets
import uuid
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from sentquote.errors import Conflict, NotFound, ServerError, ValidationError
from sentquote.models import Quote, QUOTE_STATUSES
from sentquote.utils.quote_calculator import QuoteCalculator

logger = logging.getLogger(__name__)

SLUG_ALPHABET = 'abcdefghjkmnpqrstuvwxyz23456789'
SLUG_LENGTH = 8
SLUG_ATTEMPTS = 5

FOLLOWUP_SCHEDULE = (
    (3, 'Just checking in on the quote I sent — happy to answer any questions!'),
    (7, 'Wanted to make sure you saw my quote before it expires. Let me know if you need any changes!'),
)

STATUS_ORDER = {status: rank for rank, status in enumerate(QUOTE_STATUSES)}

# Keys whose presence triggers a recompute of the money columns
MONEY_INPUTS = ('line_items', 'tax_rate', 'deposit_percent')
TEXT_FIELDS = ('client_name', 'client_email', 'title', 'description', 'notes', 'currency')


def generate_slug():
    return ''.join(secrets.choice(SLUG_ALPHABET) for _ in range(SLUG_LENGTH))


class QuoteLifecycle:
    def __init__(self, stores, now=None):
        self.stores = stores
        self._now = now or datetime.utcnow

    def now(self):
        return self._now()

    # ---------------- HELPERS ----------------
    def _get_owned(self, quote_id, owner_id):
        quote = self.stores.quotes.get_owned(quote_id, owner_id)
        if not quote:
            raise NotFound('Quote not found')
        return quote

    def _unique_slug(self):
        for _ in range(SLUG_ATTEMPTS):
            slug = generate_slug()
            if not self.stores.quotes.slug_exists(slug):
                return slug
            logger.warning("Slug collision on %s, retrying", slug)
        raise ServerError('Could not allocate a quote link')

    def _valid_until(self, valid_days):
        if not valid_days:
            return None
        return self.now() + timedelta(days=valid_days)

    # ---------------- OPERATIONS ----------------
    def create(self, owner_id, data):
        """Create a draft quote from validated input."""
        line_items = data.get('line_items') or []
        if not line_items:
            raise ValidationError('Missing required fields', details={'lineItems': ['At least one line item is required.']})
        for field in ('client_name', 'client_email', 'title'):
            if not data.get(field):
                raise ValidationError('Missing required fields')

        money = QuoteCalculator.calculate_totals(
            line_items,
            tax_rate=data.get('tax_rate') or 0,
            deposit_percent=data.get('deposit_percent') or 0,
        )
        now = self.now()
        quote = Quote(
            id=str(uuid.uuid4()),
            user_id=owner_id,
            slug=self._unique_slug(),
            client_name=data['client_name'],
            client_email=data['client_email'],
            title=data['title'],
            description=data.get('description') or '',
            notes=data.get('notes') or '',
            line_items=line_items,
            currency=data.get('currency') or 'usd',
            valid_until=self._valid_until(data.get('valid_days')),
            status='draft',
            paid_amount=0,
            view_count=0,
            created_at=now,
            updated_at=now,
            **money,
        )
        self.stores.quotes.add(quote)
        self.stores.commit()
        logger.info("Quote %s created for user %s (total=%s)", quote.id, owner_id, quote.total)
        return quote

    def update(self, quote_id, owner_id, changes):
        """Apply a partial update. Only keys present in ``changes`` are touched."""
        quote = self._get_owned(quote_id, owner_id)

        for field in TEXT_FIELDS:
            if field in changes:
                value = changes[field]
                if field in ('description', 'notes') and value is None:
                    value = ''
                setattr(quote, field, value)

        if 'valid_days' in changes:
            quote.valid_until = self._valid_until(changes['valid_days'])

        if any(key in changes for key in MONEY_INPUTS):
            if 'line_items' in changes:
                quote.line_items = changes['line_items']
            tax_rate = changes['tax_rate'] if 'tax_rate' in changes else quote.tax_rate
            deposit_percent = changes['deposit_percent'] if 'deposit_percent' in changes else quote.deposit_percent
            money = QuoteCalculator.calculate_totals(quote.line_items, tax_rate or 0, deposit_percent or 0)
            for key, value in money.items():
                setattr(quote, key, value)

        quote.updated_at = self.now()
        self.stores.commit()
        return quote

    def send(self, quote_id, owner_id):
        """Mark the quote sent, log it and schedule the two follow-ups.

        Re-sending a sent quote logs again and schedules another pair.
        """
        quote = self._get_owned(quote_id, owner_id)
        if STATUS_ORDER.get(quote.status, 0) > STATUS_ORDER['sent']:
            raise Conflict(f'Quote is already {quote.status}')

        now = self.now()
        quote.status = 'sent'
        quote.updated_at = now
        self.stores.events.record(quote.id, 'sent')
        for days, message in FOLLOWUP_SCHEDULE:
            self.stores.followups.schedule(quote.id, now + relativedelta(days=days), message)

        self.stores.commit()
        logger.info("Quote %s sent", quote.id)
        return quote

    def delete(self, quote_id, owner_id):
        quote = self._get_owned(quote_id, owner_id)
        self.stores.quotes.delete(quote)
        self.stores.commit()
        logger.info("Quote %s deleted by user %s", quote_id, owner_id)

    def list_quotes(self, owner_id):
        return self.stores.quotes.list_for_owner(owner_id)

    def get(self, quote_id, owner_id):
        """Return ``(quote, events)`` with at most 50 events, newest first."""
        quote = self._get_owned(quote_id, owner_id)
        return quote, self.stores.events.recent_for_quote(quote.id, limit=50)

    # ---------------- CLIENT-DRIVEN TRANSITIONS ----------------
    def accept(self, quote):
        now = self.now()
        quote.status = 'accepted'
        quote.accepted_at = now
        quote.updated_at = now
        self.stores.events.record(quote.id, 'accepted')
        self.stores.followups.cancel_pending(quote.id)
        self.stores.commit()
        logger.info("Quote %s accepted", quote.id)
        return quote

    def mark_paid(self, quote, amount, payment_reference):
        now = self.now()
        quote.status = 'paid'
        quote.paid_at = now
        quote.paid_amount = amount or 0
        quote.stripe_payment_intent = payment_reference
        quote.updated_at = now
        self.stores.events.record(quote.id, 'paid', {'amount': amount, 'paymentIntent': payment_reference})
        self.stores.followups.cancel_pending(quote.id)
        self.stores.commit()
        logger.info("Quote %s paid (%s)", quote.id, amount)
        return quote
