#!/usr/bin/env python3
"""Entry point for the rackbracket development server."""
import os
from rackbracket.app import create_app

config_name = os.environ.get('FLASK_ENV', 'development')
app = create_app(config_name)

# Demo players on first run
with app.app_context():
    from rackbracket.services.player_seeder import seed_players
    count = seed_players()
    if count:
        app.logger.info('Seeded %d demo players', count)

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5001))
    app.logger.info('rackbracket listening on http://localhost:%d', port)
    app.run(host='0.0.0.0', port=port, debug=(config_name == 'development'))
