from sentquote.models import Quote

SENT_OR_LATER = ('sent', 'accepted', 'paid')
ACCEPTED_OR_LATER = ('accepted', 'paid')


class StatsAggregator:
    """Read-only dashboard rollups for one user's quotes."""

    def __init__(self, stores):
        self.stores = stores

    def summary(self, user_id):
        quotes = self.stores.quotes
        return {
            'totalQuotes': quotes.count_for_owner(user_id),
            'sentQuotes': quotes.count_for_owner(user_id, SENT_OR_LATER),
            'acceptedQuotes': quotes.count_for_owner(user_id, ACCEPTED_OR_LATER),
            'paidQuotes': quotes.count_for_owner(user_id, ('paid',)),
            'totalViews': quotes.sum_for_owner(user_id, Quote.view_count),
            'totalRevenue': quotes.sum_for_owner(user_id, Quote.paid_amount, ('paid',)),
        }

    def recent_events(self, user_id, limit=20):
        return self.stores.events.recent_for_owner(user_id, limit=limit)
