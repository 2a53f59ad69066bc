class APIError(Exception):
    """Base class for errors rendered to the client as ``{"error": message}``."""

    status_code = 500
    message = 'Server error'

    def __init__(self, message=None, details=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.details = details

    def to_dict(self):
        body = {'error': self.message}
        if self.details:
            body['details'] = self.details
        return body


class ValidationError(APIError):
    status_code = 400
    message = 'Missing required fields'


class Unauthenticated(APIError):
    status_code = 401
    message = 'No token provided'


class InvalidToken(APIError):
    status_code = 401
    message = 'Invalid token'


class InvalidCredentials(APIError):
    status_code = 401
    message = 'Invalid credentials'


class NotFound(APIError):
    status_code = 404
    message = 'Not found'


class Conflict(APIError):
    status_code = 409
    message = 'Conflict'


class WebhookError(APIError):
    status_code = 400
    message = 'Webhook Error'


class PaymentsNotConfigured(APIError):
    status_code = 500
    message = 'Payments not configured'


class PaymentSetupError(APIError):
    status_code = 502
    message = 'Payment setup failed'


class ServerError(APIError):
    status_code = 500
    message = 'Server error'
