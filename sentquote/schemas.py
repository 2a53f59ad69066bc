from marshmallow import fields, validate, EXCLUDE, post_load
from marshmallow import ValidationError as SchemaValidationError

from sentquote import ma
from sentquote.errors import ValidationError


def load_or_raise(schema, data, partial=False):
    """Load request data, turning marshmallow errors into a 400.

    ``partial`` relaxes required top-level keys only; nested line items
    stay fully validated.
    """
    try:
        return schema.load(data or {}, partial=tuple(schema.fields) if partial else False)
    except SchemaValidationError as e:
        raise ValidationError('Missing required fields', details=e.messages) from e


# ---------------- REQUEST SCHEMAS ----------------

class RegisterSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True, validate=validate.Length(min=1))
    business_name = fields.String(data_key='businessName', load_default='', allow_none=True)

    @post_load
    def normalise(self, data, **kwargs):
        data['email'] = data['email'].strip().lower()
        data['business_name'] = data.get('business_name') or ''
        return data


class LoginSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, validate=validate.Length(min=1))

    @post_load
    def normalise(self, data, **kwargs):
        data['email'] = data['email'].strip().lower()
        return data


class JSONNumber(fields.Float):
    """Float validation that leaves integers as integers."""

    def _format_num(self, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return super()._format_num(value)


class LineItemSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    description = fields.String(allow_none=True)
    quantity = JSONNumber(required=True, validate=validate.Range(min=0))
    unit_price = JSONNumber(required=True, data_key='unitPrice')


class QuoteInputSchema(ma.Schema):
    """Create payload. Loaded with ``partial=True`` for updates, so only the
    keys present in the request body come back."""

    class Meta:
        unknown = EXCLUDE

    client_name = fields.String(required=True, data_key='clientName', validate=validate.Length(min=1))
    client_email = fields.String(required=True, data_key='clientEmail', validate=validate.Length(min=1))
    title = fields.String(required=True, validate=validate.Length(min=1))
    description = fields.String(allow_none=True)
    notes = fields.String(allow_none=True)
    line_items = fields.List(
        fields.Nested(LineItemSchema),
        required=True,
        data_key='lineItems',
        validate=validate.Length(min=1),
    )
    tax_rate = fields.Float(data_key='taxRate', allow_none=True, validate=validate.Range(min=0))
    deposit_percent = fields.Integer(data_key='depositPercent', allow_none=True, strict=True,
                                     validate=validate.Range(min=0, max=100))
    valid_days = fields.Integer(data_key='validDays', allow_none=True, strict=True,
                                validate=validate.Range(min=0))
    currency = fields.String(validate=validate.Length(equal=3))

    @post_load
    def serialise_line_items(self, data, **kwargs):
        # Store line items in their wire form (description/quantity/unitPrice)
        if 'line_items' in data:
            data['line_items'] = LineItemSchema(many=True).dump(data['line_items'])
        if data.get('currency'):
            data['currency'] = data['currency'].lower()
        return data


# ---------------- RESPONSE SCHEMAS ----------------

class UserSchema(ma.Schema):
    id = fields.String()
    email = fields.String()
    business_name = fields.String(data_key='businessName')
    plan = fields.String()
    stripe_connected = fields.Boolean(data_key='stripeConnected')
    created_at = fields.DateTime(data_key='createdAt')


class QuoteSchema(ma.Schema):
    """Owner's view of a quote: columns in snake_case plus ``lineItems``."""

    id = fields.String()
    user_id = fields.String()
    slug = fields.String()
    client_name = fields.String()
    client_email = fields.String()
    title = fields.String()
    description = fields.String()
    notes = fields.String()
    line_items = fields.Raw(data_key='lineItems')
    subtotal = fields.Integer()
    tax_rate = fields.Float()
    tax_amount = fields.Integer()
    total = fields.Integer()
    currency = fields.String()
    deposit_percent = fields.Integer()
    deposit_amount = fields.Integer()
    valid_until = fields.DateTime()
    status = fields.String()
    accepted_at = fields.DateTime()
    paid_at = fields.DateTime()
    paid_amount = fields.Integer()
    stripe_payment_intent = fields.String()
    view_count = fields.Integer()
    first_viewed_at = fields.DateTime()
    last_viewed_at = fields.DateTime()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class PublicQuoteSchema(ma.Schema):
    """What the client sees on the public quote page."""

    id = fields.String()
    slug = fields.String()
    business_name = fields.Function(lambda q: q.owner.business_name if q.owner else '', data_key='businessName')
    sender_email = fields.Function(lambda q: q.owner.email if q.owner else None, data_key='senderEmail')
    client_name = fields.String(data_key='clientName')
    title = fields.String()
    description = fields.String()
    line_items = fields.Raw(data_key='lineItems')
    subtotal = fields.Integer()
    tax_rate = fields.Float(data_key='taxRate')
    tax_amount = fields.Integer(data_key='taxAmount')
    total = fields.Integer()
    deposit_percent = fields.Integer(data_key='depositPercent')
    deposit_amount = fields.Integer(data_key='depositAmount')
    currency = fields.String()
    valid_until = fields.DateTime(data_key='validUntil')
    status = fields.String()
    notes = fields.String()
    created_at = fields.DateTime(data_key='createdAt')


class QuoteEventSchema(ma.Schema):
    id = fields.Integer()
    quote_id = fields.String()
    event_type = fields.String()
    event_metadata = fields.Raw(data_key='metadata')
    ip_address = fields.String()
    user_agent = fields.String()
    created_at = fields.DateTime()


user_schema = UserSchema()
quote_schema = QuoteSchema()
quotes_schema = QuoteSchema(many=True)
public_quote_schema = PublicQuoteSchema()
event_schema = QuoteEventSchema()
events_schema = QuoteEventSchema(many=True)
