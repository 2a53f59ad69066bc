from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_bcrypt import Bcrypt
from flask_marshmallow import Marshmallow
from werkzeug.exceptions import HTTPException
import logging


db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
bcrypt = Bcrypt()
ma = Marshmallow()

logger = logging.getLogger(__name__)


def create_app(config_object='sentquote.config.Config'):
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_object)

    from sentquote.logging_config import setup_logging
    setup_logging(app.config.get('LOG_LEVEL'))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    CORS(app)
    bcrypt.init_app(app)
    ma.init_app(app)

    from sentquote.payments import StripeGateway
    app.extensions['payments'] = StripeGateway.from_config(app.config)

    from sentquote import models  # noqa: F401  registers the tables

    # Initialize database automatically on first run
    with app.app_context():
        from sentquote.database_setup import initialize_database, register_db_commands

        # Register CLI commands
        register_db_commands(app)

        # Auto-initialize database on startup
        initialize_database()

    # Register blueprints
    from sentquote.routes.auth import auth_bp
    from sentquote.routes.quotes import quotes_bp
    from sentquote.routes.public import public_bp
    from sentquote.routes.webhooks import webhooks_bp
    from sentquote.routes.stats import stats_bp
    from sentquote.routes.billing import billing_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(quotes_bp, url_prefix='/api/quotes')
    app.register_blueprint(public_bp, url_prefix='/api/public/quotes')
    app.register_blueprint(webhooks_bp, url_prefix='/api/webhooks')
    app.register_blueprint(stats_bp, url_prefix='/api/stats')
    app.register_blueprint(billing_bp, url_prefix='/api')

    @app.route('/api/health')
    def health_check():
        return {
            'status': 'healthy',
            'message': 'SentQuote API is running!',
            'payments': app.extensions['payments'].configured,
        }, 200

    register_error_handlers(app)

    return app


def register_error_handlers(app):
    from sentquote.errors import APIError

    @app.errorhandler(APIError)
    def handle_api_error(error):
        if error.status_code >= 500:
            db.session.rollback()
            logger.error("%s: %s", type(error).__name__, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'error': error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        """Anything unhandled becomes a generic 500; details go to the log."""
        db.session.rollback()
        logger.exception("Unhandled error: %s", error)
        return jsonify({'error': 'Server error'}), 500
