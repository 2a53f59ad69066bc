"""Bridges quote state and Stripe: checkout initiation and webhook reconciliation."""
import logging

from sentquote.errors import NotFound
from sentquote.services.lifecycle import QuoteLifecycle
from sentquote.utils.quote_calculator import QuoteCalculator

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = ('sent', 'accepted')


class PaymentBridge:
    def __init__(self, stores, gateway, base_url, lifecycle=None):
        self.stores = stores
        self.gateway = gateway
        self.base_url = base_url.rstrip('/')
        self.lifecycle = lifecycle or QuoteLifecycle(stores)

    # ---------------- INITIATE PAYMENT ----------------
    def initiate_payment(self, slug):
        """Start a hosted checkout for the deposit (or the full total). Returns the URL."""
        quote = self.stores.quotes.get_by_slug(slug, statuses=PAYABLE_STATUSES)
        if not quote:
            raise NotFound('Quote not available for payment')

        amount = QuoteCalculator.payable_amount(quote)
        is_deposit = bool(quote.deposit_amount and quote.deposit_amount > 0)
        business_name = (quote.owner.business_name if quote.owner else '') or 'SentQuote'

        url = self.gateway.create_checkout_session(
            amount=amount,
            currency=quote.currency or 'usd',
            name=f"{quote.title}{' (Deposit)' if is_deposit else ''}",
            description=f"Quote from {business_name}",
            success_url=f"{self.base_url}/q/{quote.slug}?paid=true",
            cancel_url=f"{self.base_url}/q/{quote.slug}?cancelled=true",
            metadata={'quote_id': quote.id, 'quote_slug': quote.slug},
            customer_email=quote.client_email,
        )
        logger.info("Checkout started for quote %s (%s %s)", quote.id, amount, quote.currency)
        return url

    # ---------------- WEBHOOK ----------------
    def reconcile_webhook(self, payload, signature):
        """Apply a provider event. Irrelevant events are acknowledged and ignored.

        Raises WebhookError for a bad signature or an undecodable payload.
        """
        if not self.gateway.configured:
            logger.warning("Webhook received but STRIPE_SECRET_KEY is not set, ignoring")
            return False

        event = self.gateway.parse_event(payload, signature)
        event_type = event.get('type')
        obj = (event.get('data') or {}).get('object') or {}

        if event_type == 'checkout.session.completed':
            metadata = obj.get('metadata') or {}
            if metadata.get('quote_id'):
                return self._quote_paid(metadata['quote_id'], obj)
            if metadata.get('user_id') and obj.get('mode') == 'subscription':
                return self._plan_upgraded(metadata['user_id'])
        elif event_type == 'account.updated':
            if obj.get('charges_enabled'):
                return self._account_connected(obj.get('id'))

        logger.info("Ignoring webhook event %s", event_type)
        return False

    def _quote_paid(self, quote_id, session):
        quote = self.stores.quotes.get(quote_id)
        if not quote:
            logger.warning("Webhook for unknown quote %s", quote_id)
            return False
        if quote.status not in PAYABLE_STATUSES:
            logger.info("Quote %s is %s, payment event ignored", quote_id, quote.status)
            return False
        self.lifecycle.mark_paid(quote, session.get('amount_total'), session.get('payment_intent'))
        return True

    def _plan_upgraded(self, user_id):
        user = self.stores.users.get(user_id)
        if not user:
            logger.warning("Subscription webhook for unknown user %s", user_id)
            return False
        user.plan = 'pro'
        self.stores.commit()
        logger.info("User %s upgraded to pro", user_id)
        return True

    def _account_connected(self, account_id):
        user = self.stores.users.get_by_stripe_account(account_id) if account_id else None
        if not user:
            return False
        user.stripe_connected = True
        self.stores.commit()
        logger.info("Stripe account %s connected for user %s", account_id, user.id)
        return True
