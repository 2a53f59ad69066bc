from flask import Blueprint, request, jsonify

from sentquote.schemas import public_quote_schema
from sentquote.services import get_public_quotes, get_payment_bridge

public_bp = Blueprint('public', __name__)


def _client_ip():
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote_addr


# ---------------- VIEW (client-facing) ----------------
@public_bp.route('/<slug>', methods=['GET'])
def view_quote(slug):
    quote = get_public_quotes().view(
        slug,
        ip_address=_client_ip(),
        user_agent=request.headers.get('User-Agent'),
    )
    return jsonify({'quote': public_quote_schema.dump(quote)}), 200


# ---------------- ACCEPT ----------------
@public_bp.route('/<slug>/accept', methods=['POST'])
def accept_quote(slug):
    get_public_quotes().accept(slug)
    return jsonify({'ok': True, 'message': 'Quote accepted!'}), 200


# ---------------- PAY ----------------
@public_bp.route('/<slug>/pay', methods=['POST'])
def pay_quote(slug):
    url = get_payment_bridge().initiate_payment(slug)
    return jsonify({'url': url}), 200
