from flask import Blueprint, request, jsonify

from sentquote.schemas import QuoteInputSchema, load_or_raise, quote_schema, quotes_schema, events_schema
from sentquote.services import get_lifecycle
from sentquote.utils.auth import jwt_required_custom, current_identity

quotes_bp = Blueprint('quotes', __name__)


# -------------------- LIST / CREATE --------------------
@quotes_bp.route('', methods=['GET'])
@jwt_required_custom
def list_quotes():
    quotes = get_lifecycle().list_quotes(current_identity()['id'])
    return jsonify({'quotes': quotes_schema.dump(quotes)}), 200


@quotes_bp.route('', methods=['POST'])
@jwt_required_custom
def create_quote():
    data = load_or_raise(QuoteInputSchema(), request.get_json(silent=True))

    quote = get_lifecycle().create(current_identity()['id'], data)
    return jsonify({'quote': quote_schema.dump(quote)}), 201


# -------------------- SINGLE QUOTE --------------------
@quotes_bp.route('/<quote_id>', methods=['GET'])
@jwt_required_custom
def get_quote(quote_id):
    quote, events = get_lifecycle().get(quote_id, current_identity()['id'])
    return jsonify({'quote': quote_schema.dump(quote), 'events': events_schema.dump(events)}), 200


@quotes_bp.route('/<quote_id>', methods=['PUT'])
@jwt_required_custom
def update_quote(quote_id):
    # partial=True: only keys present in the body are returned and applied
    changes = load_or_raise(QuoteInputSchema(), request.get_json(silent=True), partial=True)

    quote = get_lifecycle().update(quote_id, current_identity()['id'], changes)
    return jsonify({'quote': quote_schema.dump(quote)}), 200


@quotes_bp.route('/<quote_id>', methods=['DELETE'])
@jwt_required_custom
def delete_quote(quote_id):
    get_lifecycle().delete(quote_id, current_identity()['id'])
    return jsonify({'ok': True}), 200


# -------------------- SEND --------------------
@quotes_bp.route('/<quote_id>/send', methods=['POST'])
@jwt_required_custom
def send_quote(quote_id):
    quote = get_lifecycle().send(quote_id, current_identity()['id'])
    return jsonify({'quote': quote_schema.dump(quote)}), 200
