# sentquote/routes/billing.py

from flask import Blueprint, jsonify, current_app

from sentquote.services import get_accounts
from sentquote.utils.auth import jwt_required_custom, current_identity

billing_bp = Blueprint('billing', __name__)


# ---------------- STRIPE CONNECT (receive payments) ----------------
@billing_bp.route('/stripe/connect', methods=['POST'])
@jwt_required_custom
def stripe_connect():
    """Creates an Express account for the user and returns its onboarding link."""
    url = get_accounts().connect_stripe(current_identity()['id'])
    return jsonify({'url': url}), 200


# ---------------- PRO SUBSCRIPTION CHECKOUT ----------------
@billing_bp.route('/billing/checkout', methods=['POST'])
@jwt_required_custom
def billing_checkout():
    url = get_accounts().pro_checkout(
        current_identity()['id'],
        price=current_app.config['PRO_PLAN_PRICE'],
    )
    return jsonify({'url': url}), 200
