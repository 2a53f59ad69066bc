from decimal import Decimal, ROUND_HALF_UP


def _to_decimal(value):
    if value is None:
        return Decimal('0')
    return Decimal(str(value))


def round_half_up(value):
    """Round a Decimal to the nearest integer, halves away from zero."""
    return int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class QuoteCalculator:
    """Handle all money calculations for quotes. Amounts are integer cents."""

    @staticmethod
    def line_amount(item):
        """Cents for a single line item: round(quantity * unit_price * 100)."""
        quantity = _to_decimal(item.get('quantity'))
        unit_price = _to_decimal(item.get('unit_price', item.get('unitPrice')))
        return round_half_up(quantity * unit_price * 100)

    @staticmethod
    def calculate_subtotal(line_items):
        return sum(QuoteCalculator.line_amount(item) for item in line_items)

    @staticmethod
    def calculate_tax(subtotal, tax_rate):
        return round_half_up(_to_decimal(subtotal) * _to_decimal(tax_rate) / 100)

    @staticmethod
    def calculate_deposit(total, deposit_percent):
        if not deposit_percent:
            return 0
        return round_half_up(_to_decimal(total) * _to_decimal(deposit_percent) / 100)

    @staticmethod
    def calculate_totals(line_items, tax_rate=0, deposit_percent=0):
        """Return the computed money columns for a quote."""
        subtotal = QuoteCalculator.calculate_subtotal(line_items)
        tax_amount = QuoteCalculator.calculate_tax(subtotal, tax_rate)
        total = subtotal + tax_amount

        return {
            'subtotal': subtotal,
            'tax_rate': float(tax_rate or 0),
            'tax_amount': tax_amount,
            'total': total,
            'deposit_percent': int(deposit_percent or 0),
            'deposit_amount': QuoteCalculator.calculate_deposit(total, deposit_percent),
        }

    @staticmethod
    def payable_amount(quote):
        """Deposit when one is set, otherwise the full total."""
        if quote.deposit_amount and quote.deposit_amount > 0:
            return quote.deposit_amount
        return quote.total
