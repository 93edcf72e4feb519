"""Seed the database with a handful of demo players."""

from rackbracket.app import db
from rackbracket.models import Player

DEMO_PLAYERS = (
    ('Minnesota Fats', 'Fats'),
    ('Fast Eddie Felson', 'Fast Eddie'),
    ('Willie Mosconi', 'Mr. Pocket Billiards'),
    ('Jean Balukas', 'Jean'),
    ('Efren Reyes', 'The Magician'),
    ('Allison Fisher', 'The Duchess of Doom'),
    ('Earl Strickland', 'The Pearl'),
    ('Jeanette Lee', 'The Black Widow'),
)


def seed_players():
    """Insert demo players only when the player table is empty."""
    if Player.query.first():
        return 0

    try:
        for display_name, nickname in DEMO_PLAYERS:
            db.session.add(Player(display_name=display_name, nickname=nickname))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return len(DEMO_PLAYERS)
