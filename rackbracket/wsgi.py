"""WSGI entrypoint used by gunicorn."""
import os

from rackbracket.app import create_app
from rackbracket.services.player_seeder import seed_players

config_name = os.environ.get('FLASK_ENV', 'production')
app = create_app(config_name)

if app.config.get('AUTO_SEED_PLAYERS'):
    with app.app_context():
        seeded = seed_players()
        if seeded:
            app.logger.info('Seeded %d demo players', seeded)
