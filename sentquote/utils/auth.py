from functools import wraps
from flask_jwt_extended import create_access_token, verify_jwt_in_request, get_jwt_identity, get_jwt
from flask_jwt_extended.exceptions import JWTExtendedException, NoAuthorizationError, InvalidHeaderError
from jwt import PyJWTError

from sentquote.errors import Unauthenticated, InvalidToken


def issue_token(user):
    """Signed access token carrying the user id and email.

    Expiry comes from JWT_ACCESS_TOKEN_EXPIRES (30 days).
    """
    return create_access_token(
        identity=str(user.id),
        additional_claims={'email': user.email}
    )


def jwt_required_custom(f):
    """Require ``Authorization: Bearer <token>`` on a route.

    A missing or malformed header raises Unauthenticated; a token with a bad
    signature or past its expiry raises InvalidToken.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            verify_jwt_in_request()
        except (NoAuthorizationError, InvalidHeaderError) as e:
            raise Unauthenticated() from e
        except (JWTExtendedException, PyJWTError) as e:
            raise InvalidToken() from e
        return f(*args, **kwargs)
    return decorated


def current_identity():
    claims = get_jwt()
    return {'id': get_jwt_identity(), 'email': claims.get('email')}
