from .user import User
from .quote import Quote, QuoteEvent, Followup, QUOTE_STATUSES

__all__ = [
    'User', 'Quote', 'QuoteEvent', 'Followup', 'QUOTE_STATUSES'
]
