import os

basedir = os.path.abspath(os.path.dirname(__file__))

DEV_SECRET_KEY = 'dev-secret-key-change-in-prod'


def _env_bool(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {'1', 'true', 'yes', 'on'}


def _env_int(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _env_choice(name, choices, default):
    raw = str(os.environ.get(name) or '').strip().lower()
    if raw in choices:
        return raw
    return default


def _normalize_database_url(raw_url):
    if not raw_url:
        return raw_url
    if raw_url.startswith('postgres://'):
        return raw_url.replace('postgres://', 'postgresql://', 1)
    return raw_url


class BaseConfig:
    SECRET_KEY = os.environ.get('SECRET_KEY', DEV_SECRET_KEY)
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    DEFAULT_SEEDING_METHOD = _env_choice('DEFAULT_SEEDING_METHOD', {'random', 'manual'}, 'random')
    DEFAULT_MATCH_FORMAT = _env_choice('DEFAULT_MATCH_FORMAT', {'single', 'race_to', 'best_of'}, 'single')
    MAX_PARTICIPANTS = _env_int('MAX_PARTICIPANTS', 128)
    AUTO_SEED_PLAYERS = _env_bool('AUTO_SEED_PLAYERS', False)


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG').upper()
    SQLALCHEMY_DATABASE_URI = _normalize_database_url(
        os.environ.get(
            'DATABASE_URL',
            'sqlite:///' + os.path.join(basedir, '..', 'rackbracket_dev.db')
        )
    )


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    DEFAULT_SEEDING_METHOD = 'manual'
    MAX_PARTICIPANTS = 64


class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = _normalize_database_url(os.environ.get('DATABASE_URL'))


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}
