from sentquote import create_app
import logging

logger = logging.getLogger('sentquote')


def check_environment(app):
    """Warn about settings that should not keep their development defaults"""
    warnings = []

    if app.config['JWT_SECRET_KEY'] == 'sentquote-dev-secret-change-in-production':
        warnings.append('JWT_SECRET_KEY is using the development default')
    if not app.config.get('STRIPE_SECRET_KEY'):
        warnings.append('STRIPE_SECRET_KEY is not set, payments are disabled')
    if not app.config.get('STRIPE_WEBHOOK_SECRET'):
        warnings.append('STRIPE_WEBHOOK_SECRET is not set, webhook signatures are NOT verified')

    for message in warnings:
        logger.warning(message)

    return not warnings


if __name__ == '__main__':
    app = create_app()
    check_environment(app)

    port = app.config['PORT']
    logger.info("Starting SentQuote API on port %s", port)
    app.run(host='0.0.0.0', port=port, debug=app.config.get('DEBUG', False))
