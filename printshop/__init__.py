import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

logger = logging.getLogger(__name__)


def create_app(config_name=None, **overrides):
    """Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    from config import config
    app.config.from_object(config[config_name])
    app.config.update(overrides)

    _configure_logging(app)
    _init_sentry(app)
    _check_production_settings(app, config_name)

    # Initialize extensions
    from printshop.extensions import limiter
    db.init_app(app)
    limiter.init_app(app)
    CORS(app, resources={
        r'/api/*': {'origins': app.config['CORS_ORIGINS']},
        r'/uploads/*': {'origins': app.config['CORS_ORIGINS']},
    })

    from printshop.middleware import RequestIdMiddleware
    app.wsgi_app = RequestIdMiddleware(app.wsgi_app)

    from printshop.services.storage import init_storage
    init_storage(app)

    # Register blueprints
    from printshop.routes import (
        members_bp, job_orders_bp, admin_bp, paper_sizes_bp, upload_bp,
    )
    app.register_blueprint(members_bp, url_prefix='/api/vip-members')
    app.register_blueprint(job_orders_bp, url_prefix='/api/job-orders')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(paper_sizes_bp, url_prefix='/api/paper-sizes')
    app.register_blueprint(upload_bp)

    from printshop.errors import register_error_handlers
    register_error_handlers(app)

    from printshop.cli import register_commands
    register_commands(app)

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        return response

    # Health check endpoint
    @app.route('/api/health', methods=['GET'])
    @limiter.exempt
    def health():
        return jsonify({'success': True, 'message': 'API is running'}), 200

    with app.app_context():
        from printshop import models  # noqa: F401  registers tables
        from printshop.services.catalog import seed_paper_sizes
        db.create_all()
        seed_paper_sizes()

    return app


class _RequestIdFilter(logging.Filter):
    """Attach the current request id (if any) to every log record."""

    def filter(self, record):
        from flask import has_request_context, request
        record.request_id = '-'
        if has_request_context():
            record.request_id = request.environ.get('request_id', '-')
        return True


def _configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    root = logging.getLogger()
    if not any(getattr(h, '_printshop', False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s'
        ))
        handler.addFilter(_RequestIdFilter())
        handler._printshop = True
        root.addHandler(handler)
    root.setLevel(level)
    app.logger.setLevel(level)


def _init_sentry(app):
    # Sentry error monitoring (optional -- only active when SENTRY_DSN is set)
    dsn = app.config.get('SENTRY_DSN')
    if not dsn:
        return
    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    sentry_sdk.init(
        dsn=dsn,
        integrations=[FlaskIntegration()],
        traces_sample_rate=0.1,
    )


def _check_production_settings(app, config_name):
    if config_name != 'production':
        return
    if app.config['SECRET_KEY'].startswith('dev-'):
        logger.warning('SECRET_KEY is using an insecure default. Set it via environment variable!')
    if '*' in app.config['CORS_ORIGINS']:
        logger.critical("CORS_ORIGINS is set to '*' in a non-development environment!")
    if not app.config.get('SENTRY_DSN'):
        logger.warning('SENTRY_DSN is not set -- error monitoring is disabled.')
