"""
Fleet Subscription API Application Factory.
"""
import importlib
import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_restx import Api
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import text

# Initialize extensions
db = SQLAlchemy()
jwt = JWTManager()
migrate = Migrate()

logger = logging.getLogger(__name__)

CONFIG_MAPPING = {
    'development': ('fleetsub.config.development_config', 'DevelopmentConfig'),
    'testing': ('fleetsub.config.testing_config', 'TestingConfig'),
    'production': ('fleetsub.config.production_config', 'ProductionConfig'),
}


def create_app(config_name=None):
    """
    Application Factory Pattern implementation.

    Args:
        config_name: Configuration name to use (development, testing, production).

    Returns:
        Flask application instance.
    """
    load_dotenv()

    app = Flask(__name__)

    app_config = config_name or os.getenv("FLASK_ENV", "development")
    if app_config not in CONFIG_MAPPING:
        app_config = "development"

    module_path, class_name = CONFIG_MAPPING[app_config]
    config_class = getattr(importlib.import_module(module_path), class_name)
    app.config.from_object(config_class)

    from fleetsub.logging_config import configure_logging
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    logger.info("Using configuration: %s", class_name)

    db.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)

    # Import models to ensure they're registered with SQLAlchemy
    from fleetsub.models import Driver, Subscription, User  # noqa: F401
    from fleetsub.models.plan import PlanCatalog

    # The catalog is built once; nothing mutates it afterwards
    app.extensions['plan_catalog'] = PlanCatalog.from_config(
        app.config['SUBSCRIPTION_PLANS']
    )

    _register_jwt_callbacks()

    api = Api(
        app,
        version=app.config.get("API_VERSION", "1.0"),
        title=app.config.get("API_TITLE", "Fleet Subscription API"),
        description=app.config.get("API_DESCRIPTION", ""),
        doc="/api/docs",
        authorizations={
            'Bearer Auth': {
                'type': 'apiKey',
                'in': 'header',
                'name': 'Authorization',
                'description': 'Enter: **Bearer &lt;JWT&gt;**'
            },
        },
        security='Bearer Auth'
    )

    from fleetsub.errors import register_error_handlers
    register_error_handlers(api)

    from fleetsub.api.auth import auth_ns
    from fleetsub.api.drivers import driver_ns
    from fleetsub.api.subscriptions import plan_ns, subscription_ns

    api.add_namespace(auth_ns, path='/api/auth')
    api.add_namespace(plan_ns, path='/api/plans')
    api.add_namespace(subscription_ns, path='/api/subscription')
    api.add_namespace(driver_ns, path='/api/drivers')

    @app.before_request
    def log_request():
        logger.debug("%s %s", request.method, request.path)

    @app.route('/health')
    def health_check():
        """Health check endpoint to verify the application is running."""
        return jsonify({
            'status': 'healthy',
            'environment': app_config,
            'database_connected': _check_db_connection()
        })

    @app.shell_context_processor
    def shell_context():
        return {"app": app, "db": db}

    return app


def _check_db_connection():
    """Check if the database connection is working."""
    try:
        db.session.execute(text('SELECT 1'))
        return True
    except Exception as e:
        logger.error("Database connection error: %s", e)
        return False


def _register_jwt_callbacks():
    """Resolve the JWT identity into a live, active user."""
    from fleetsub.models.user import User

    @jwt.user_lookup_loader
    def load_user(jwt_header, jwt_payload):
        return db.session.get(User, int(jwt_payload["sub"]))

    @jwt.user_lookup_error_loader
    def user_lookup_error(jwt_header, jwt_payload):
        return jsonify({'message': 'User no longer exists'}), 401

    @jwt.token_verification_loader
    def user_is_active(jwt_header, jwt_payload):
        user = db.session.get(User, int(jwt_payload["sub"]))
        return user is None or user.is_active

    @jwt.token_verification_failed_loader
    def user_deactivated(jwt_header, jwt_payload):
        return jsonify({'message': 'User account is deactivated'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({'message': reason}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({'message': 'Token has expired'}), 401
