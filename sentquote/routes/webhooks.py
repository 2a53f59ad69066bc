from flask import Blueprint, request, jsonify

from sentquote.services import get_payment_bridge

webhooks_bp = Blueprint('webhooks', __name__)


# ---------------- STRIPE WEBHOOK ----------------
@webhooks_bp.route('/stripe', methods=['POST'])
def stripe_webhook():
    """Always 200 for events we understand or ignore; 400 only for a bad
    signature or payload so Stripe does not retry forever."""
    payload = request.get_data(as_text=True)
    sig_header = request.headers.get('Stripe-Signature')

    get_payment_bridge().reconcile_webhook(payload, sig_header)
    return jsonify({'received': True}), 200
