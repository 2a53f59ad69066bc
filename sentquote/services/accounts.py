"""User accounts and the merchant-side Stripe flows (Connect, Pro plan)."""
import logging

from sentquote import bcrypt
from sentquote.errors import Conflict, InvalidCredentials, NotFound
from sentquote.models import User

logger = logging.getLogger(__name__)

PRO_PLAN_NAME = 'SentQuote Pro'
PRO_PLAN_DESCRIPTION = 'Unlimited quotes, payment collection, auto follow-ups'


class AccountService:
    def __init__(self, stores, gateway=None, base_url=''):
        self.stores = stores
        self.gateway = gateway
        self.base_url = base_url.rstrip('/')

    def register(self, email, password, business_name=''):
        if self.stores.users.get_by_email(email):
            raise Conflict('Email already registered')

        user = User(
            email=email,
            password_hash=bcrypt.generate_password_hash(password).decode('utf-8'),
            business_name=business_name or '',
            plan='free',
            stripe_connected=False,
        )
        self.stores.users.add(user)
        self.stores.commit()
        logger.info("Registered user %s", user.id)
        return user

    def authenticate(self, email, password):
        user = self.stores.users.get_by_email(email)
        if not user or not bcrypt.check_password_hash(user.password_hash, password):
            raise InvalidCredentials()
        return user

    def get_user(self, user_id):
        user = self.stores.users.get(user_id)
        if not user:
            raise NotFound('User not found')
        return user

    # ---------------- STRIPE CONNECT ----------------
    def connect_stripe(self, user_id):
        user = self.get_user(user_id)
        account_id, url = self.gateway.create_connect_onboarding(
            refresh_url=f"{self.base_url}/dashboard/settings",
            return_url=f"{self.base_url}/dashboard/settings?stripe=connected",
        )
        user.stripe_account_id = account_id
        self.stores.commit()
        logger.info("Stripe account %s created for user %s", account_id, user.id)
        return url

    # ---------------- PRO SUBSCRIPTION ----------------
    def pro_checkout(self, user_id, price):
        user = self.get_user(user_id)
        return self.gateway.create_subscription_checkout(
            amount=price,
            currency='usd',
            name=PRO_PLAN_NAME,
            description=PRO_PLAN_DESCRIPTION,
            success_url=f"{self.base_url}/dashboard?upgraded=true",
            cancel_url=f"{self.base_url}/dashboard/settings",
            metadata={'user_id': user.id},
            customer_email=user.email,
        )
