import logging
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from rackbracket.config import config, DEV_SECRET_KEY

db = SQLAlchemy()

_LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def _parse_allowed_origins(raw_origins):
    if not raw_origins:
        return '*'

    if isinstance(raw_origins, (list, tuple, set)):
        cleaned = [origin for origin in raw_origins if origin]
        return cleaned or '*'

    raw_text = str(raw_origins).strip()
    if not raw_text or raw_text == '*':
        return '*'

    origins = [origin.strip() for origin in raw_text.split(',') if origin.strip()]
    return origins or '*'


def _configure_logging(app):
    """Attach one stream handler to the package logger at the configured level."""
    level_name = str(app.config.get('LOG_LEVEL') or 'INFO').upper()
    level = getattr(logging, level_name, logging.INFO)
    package_logger = logging.getLogger('rackbracket')
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        package_logger.addHandler(handler)
    app.logger.setLevel(level)


def create_app(config_name='development'):
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    allowed_origins = _parse_allowed_origins(app.config.get('CORS_ALLOWED_ORIGINS', '*'))
    if str(config_name).strip().lower() == 'production':
        secret_key = str(app.config.get('SECRET_KEY') or '').strip()
        if not secret_key or secret_key == DEV_SECRET_KEY:
            raise RuntimeError('SECRET_KEY must be set to a non-default value in production')
        if allowed_origins == '*':
            raise RuntimeError('CORS_ALLOWED_ORIGINS must be explicitly set in production')
        if not app.config.get('SQLALCHEMY_DATABASE_URI'):
            raise RuntimeError('DATABASE_URL must be set in production')

    _configure_logging(app)
    db.init_app(app)
    CORS(app, resources={r'/api/*': {'origins': allowed_origins}})

    from rackbracket.routes.tournaments import tournaments_bp

    app.register_blueprint(tournaments_bp, url_prefix='/api/tournaments')

    @app.route('/api/health')
    def health():
        return jsonify({'status': 'ok'})

    with app.app_context():
        from rackbracket import models  # noqa: F401
        db.create_all()

    app.logger.info('rackbracket started with %s config', config_name)
    return app
