from flask import current_app

from sentquote import db
from sentquote.stores import Stores
from .lifecycle import QuoteLifecycle
from .public import PublicQuotes
from .payment_bridge import PaymentBridge
from .stats import StatsAggregator
from .accounts import AccountService


def get_stores():
    return Stores(db.session)


def get_gateway():
    return current_app.extensions['payments']


def get_lifecycle():
    return QuoteLifecycle(get_stores())


def get_public_quotes():
    return PublicQuotes(get_stores())


def get_payment_bridge():
    return PaymentBridge(get_stores(), get_gateway(), current_app.config['BASE_URL'])


def get_stats():
    return StatsAggregator(get_stores())


def get_accounts():
    return AccountService(get_stores(), get_gateway(), current_app.config['BASE_URL'])


__all__ = [
    'QuoteLifecycle', 'PublicQuotes', 'PaymentBridge', 'StatsAggregator', 'AccountService',
    'get_lifecycle', 'get_public_quotes', 'get_payment_bridge', 'get_stats', 'get_accounts',
]
