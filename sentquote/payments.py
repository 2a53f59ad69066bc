"""Stripe collaborator.

Everything that talks to the Stripe SDK lives here so the services can be
exercised with a fake gateway.
"""
import json
import logging

import stripe

from sentquote.errors import PaymentsNotConfigured, PaymentSetupError, WebhookError

logger = logging.getLogger(__name__)


class StripeGateway:
    def __init__(self, secret_key=None, webhook_secret=None):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret

    @classmethod
    def from_config(cls, config):
        return cls(
            secret_key=config.get('STRIPE_SECRET_KEY'),
            webhook_secret=config.get('STRIPE_WEBHOOK_SECRET'),
        )

    @property
    def configured(self):
        return bool(self.secret_key)

    def _require_key(self):
        if not self.configured:
            raise PaymentsNotConfigured()
        stripe.api_key = self.secret_key

    # ---------------- CHECKOUT ----------------
    def create_checkout_session(self, amount, currency, name, description, success_url,
                                cancel_url, metadata, customer_email=None):
        """One-off hosted checkout for ``amount`` minor units. Returns the session URL."""
        self._require_key()
        try:
            session = stripe.checkout.Session.create(
                payment_method_types=['card'],
                line_items=[{
                    'price_data': {
                        'currency': currency,
                        'product_data': {'name': name, 'description': description},
                        'unit_amount': amount,
                    },
                    'quantity': 1,
                }],
                mode='payment',
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
                customer_email=customer_email,
            )
        except stripe.StripeError as e:
            logger.error("Stripe checkout session failed: %s", e)
            raise PaymentSetupError() from e
        return session.url

    def create_subscription_checkout(self, amount, currency, name, description, success_url,
                                     cancel_url, metadata, customer_email=None):
        """Monthly subscription checkout. Returns the session URL."""
        self._require_key()
        try:
            session = stripe.checkout.Session.create(
                payment_method_types=['card'],
                line_items=[{
                    'price_data': {
                        'currency': currency,
                        'product_data': {'name': name, 'description': description},
                        'unit_amount': amount,
                        'recurring': {'interval': 'month'},
                    },
                    'quantity': 1,
                }],
                mode='subscription',
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
                customer_email=customer_email,
            )
        except stripe.StripeError as e:
            logger.error("Stripe subscription checkout failed: %s", e)
            raise PaymentSetupError('Checkout failed') from e
        return session.url

    # ---------------- CONNECT ----------------
    def create_connect_onboarding(self, refresh_url, return_url):
        """Create an Express account and its onboarding link.

        Returns ``(account_id, onboarding_url)``.
        """
        self._require_key()
        try:
            account = stripe.Account.create(type='express')
            link = stripe.AccountLink.create(
                account=account.id,
                refresh_url=refresh_url,
                return_url=return_url,
                type='account_onboarding',
            )
        except stripe.StripeError as e:
            logger.error("Stripe Connect onboarding failed: %s", e)
            raise PaymentSetupError('Failed to setup Stripe') from e
        return account.id, link.url

    # ---------------- WEBHOOKS ----------------
    def parse_event(self, payload, signature):
        """Verify (when a webhook secret is configured) and decode an event.

        Without a webhook secret the payload is trusted as-is, which is only
        meant for local development.
        """
        if self.webhook_secret:
            if not signature:
                raise WebhookError('Webhook Error: missing signature')
            try:
                stripe.WebhookSignature.verify_header(payload, signature, self.webhook_secret)
            except stripe.SignatureVerificationError as e:
                raise WebhookError(f'Webhook Error: {e}') from e

        try:
            event = json.loads(payload)
        except ValueError as e:
            raise WebhookError(f'Webhook Error: {e}') from e
        if not isinstance(event, dict):
            raise WebhookError('Webhook Error: unexpected payload')
        return event
