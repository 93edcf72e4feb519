"""Tests for app startup helpers and production configuration checks."""
import pytest

from rackbracket.app import _parse_allowed_origins, create_app
from rackbracket.config import config, DEV_SECRET_KEY, _normalize_database_url


def test_parse_allowed_origins():
    assert _parse_allowed_origins(None) == '*'
    assert _parse_allowed_origins(' * ') == '*'
    assert _parse_allowed_origins('https://a.example.com, https://b.example.com') == [
        'https://a.example.com',
        'https://b.example.com',
    ]
    assert _parse_allowed_origins(['https://a.example.com', '']) == ['https://a.example.com']
    assert _parse_allowed_origins(' , ') == '*'


def test_normalize_database_url_rewrites_legacy_postgres_scheme():
    assert _normalize_database_url('postgres://u:p@db/rack') == 'postgresql://u:p@db/rack'
    assert _normalize_database_url('sqlite:///x.db') == 'sqlite:///x.db'
    assert _normalize_database_url(None) is None


def test_production_requires_real_secret_key(monkeypatch):
    production = config['production']
    monkeypatch.setattr(production, 'SECRET_KEY', DEV_SECRET_KEY)
    monkeypatch.setattr(production, 'CORS_ALLOWED_ORIGINS', 'https://rack.example.com')
    monkeypatch.setattr(production, 'SQLALCHEMY_DATABASE_URI', 'sqlite:///:memory:')
    with pytest.raises(RuntimeError, match='SECRET_KEY'):
        create_app('production')


def test_production_requires_explicit_origins(monkeypatch):
    production = config['production']
    monkeypatch.setattr(production, 'SECRET_KEY', 'a-real-secret')
    monkeypatch.setattr(production, 'CORS_ALLOWED_ORIGINS', '*')
    monkeypatch.setattr(production, 'SQLALCHEMY_DATABASE_URI', 'sqlite:///:memory:')
    with pytest.raises(RuntimeError, match='CORS_ALLOWED_ORIGINS'):
        create_app('production')


def test_production_requires_database_url(monkeypatch):
    production = config['production']
    monkeypatch.setattr(production, 'SECRET_KEY', 'a-real-secret')
    monkeypatch.setattr(production, 'CORS_ALLOWED_ORIGINS', 'https://rack.example.com')
    monkeypatch.setattr(production, 'SQLALCHEMY_DATABASE_URI', None)
    with pytest.raises(RuntimeError, match='DATABASE_URL'):
        create_app('production')


def test_testing_config_defaults(app):
    assert app.config['TESTING']
    assert app.config['DEFAULT_SEEDING_METHOD'] == 'manual'
    assert app.config['MAX_PARTICIPANTS'] == 64
