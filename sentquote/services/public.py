"""Client-facing access to quotes by slug. No authentication."""
from sentquote.errors import NotFound
from sentquote.services.lifecycle import QuoteLifecycle


class PublicQuotes:
    def __init__(self, stores, lifecycle=None):
        self.stores = stores
        self.lifecycle = lifecycle or QuoteLifecycle(stores)

    def view(self, slug, ip_address=None, user_agent=None):
        """Fetch a non-draft quote and record the view."""
        quote = self.stores.quotes.get_by_slug(slug, exclude_status='draft')
        if not quote:
            raise NotFound('Quote not found')

        self.stores.quotes.record_view(quote.id, self.lifecycle.now())
        self.stores.events.record(
            quote.id, 'viewed',
            ip_address=ip_address or 'unknown',
            user_agent=user_agent or 'unknown',
        )
        self.stores.commit()
        # commit expired the instance, so the counters reload from the row
        return quote

    def accept(self, slug):
        quote = self.stores.quotes.get_by_slug(slug, statuses=['sent'])
        if not quote:
            raise NotFound('Quote not found or already accepted')
        return self.lifecycle.accept(quote)
