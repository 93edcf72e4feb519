"""Read-only player lookup used when presenting brackets and standings."""
from rackbracket.models import Player


class ProfileLookup:

    def __init__(self, store):
        self.store = store

    def existing_ids(self, player_ids):
        wanted = {pid for pid in player_ids if pid is not None}
        if not wanted:
            return set()
        rows = self.store.session.query(Player.id).filter(Player.id.in_(wanted)).all()
        return {row[0] for row in rows}

    def display_names(self, player_ids):
        wanted = {pid for pid in player_ids if pid is not None}
        if not wanted:
            return {}
        players = self.store.session.query(Player).filter(Player.id.in_(wanted)).all()
        return {player.id: player.display_name for player in players}
