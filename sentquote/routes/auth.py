from flask import Blueprint, request, jsonify

from sentquote.schemas import RegisterSchema, LoginSchema, load_or_raise, user_schema
from sentquote.services import get_accounts
from sentquote.utils.auth import issue_token, jwt_required_custom, current_identity

auth_bp = Blueprint('auth', __name__)


# ------------------ REGISTER ------------------
@auth_bp.route('/register', methods=['POST'])
def register():
    data = load_or_raise(RegisterSchema(), request.get_json(silent=True))

    user = get_accounts().register(data['email'], data['password'], data['business_name'])
    return jsonify({'token': issue_token(user), 'user': user_schema.dump(user)}), 201


# ------------------ LOGIN ------------------
@auth_bp.route('/login', methods=['POST'])
def login():
    data = load_or_raise(LoginSchema(), request.get_json(silent=True))

    user = get_accounts().authenticate(data['email'], data['password'])
    return jsonify({'token': issue_token(user), 'user': user_schema.dump(user)}), 200


# ------------------ PROFILE ------------------
@auth_bp.route('/me', methods=['GET'])
@jwt_required_custom
def me():
    user = get_accounts().get_user(current_identity()['id'])
    return jsonify({'user': user_schema.dump(user)}), 200
