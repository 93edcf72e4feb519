from rackbracket.app import db
from rackbracket.time_utils import utcnow_naive, isoformat_or_none

SINGLE_ELIMINATION = 'single_elimination'
DOUBLE_ELIMINATION = 'double_elimination'
TOURNAMENT_FORMATS = {SINGLE_ELIMINATION, DOUBLE_ELIMINATION}

SEEDING_METHODS = {'random', 'manual'}
MATCH_FORMATS = {'single', 'race_to', 'best_of'}

WINNERS = 'winners'
LOSERS = 'losers'
GRAND_FINAL = 'grand_final'

PLAYER_1 = 'player_1'
PLAYER_2 = 'player_2'
SLOTS = (PLAYER_1, PLAYER_2)


class Player(db.Model):
    """Player profile; the bracket engine only reads it for display."""
    id = db.Column(db.Integer, primary_key=True)
    display_name = db.Column(db.String(120), nullable=False)
    nickname = db.Column(db.String(80), default='')
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    def to_dict(self):
        return {
            'id': self.id,
            'display_name': self.display_name,
            'nickname': self.nickname,
            'created_at': isoformat_or_none(self.created_at),
        }


class Tournament(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    format = db.Column(db.String(40), default=SINGLE_ELIMINATION, nullable=False)
    seeding_method = db.Column(db.String(20), default='random')
    match_format = db.Column(db.String(20), default='single')  # single, race_to, best_of
    match_format_target = db.Column(db.Integer, nullable=True)
    total_participants = db.Column(db.Integer, default=0)
    bracket_size = db.Column(db.Integer, nullable=True)
    winners_rounds = db.Column(db.Integer, default=0)
    losers_rounds = db.Column(db.Integer, default=0)
    status = db.Column(db.String(20), default='setup')
    # setup, in_progress, completed
    champion_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=True)
    champion_partner_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=True)
    started_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    participants = db.relationship(
        'TournamentParticipant',
        backref='tournament',
        order_by='TournamentParticipant.seed',
        cascade='all, delete-orphan',
    )
    matches = db.relationship(
        'TournamentMatch',
        backref='tournament',
        order_by='TournamentMatch.match_number',
        cascade='all, delete-orphan',
    )

    @property
    def is_double_elimination(self):
        return self.format == DOUBLE_ELIMINATION

    def to_dict(self, include_participants=False):
        data = {
            'id': self.id,
            'name': self.name,
            'format': self.format,
            'seeding_method': self.seeding_method,
            'match_format': self.match_format,
            'match_format_target': self.match_format_target,
            'total_participants': self.total_participants,
            'bracket_size': self.bracket_size,
            'winners_rounds': self.winners_rounds,
            'losers_rounds': self.losers_rounds,
            'status': self.status,
            'champion_id': self.champion_id,
            'champion_partner_id': self.champion_partner_id,
            'started_at': isoformat_or_none(self.started_at),
            'completed_at': isoformat_or_none(self.completed_at),
            'created_at': isoformat_or_none(self.created_at),
        }
        if include_participants:
            data['participants'] = [p.to_dict() for p in self.participants]
        return data


class TournamentParticipant(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(db.Integer, db.ForeignKey('tournament.id'), nullable=False)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    partner_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=True)
    seed = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), default='active')  # active, eliminated
    eliminated_round = db.Column(db.Integer, nullable=True)

    __table_args__ = (
        db.UniqueConstraint('tournament_id', 'seed', name='uq_tournament_participant_seed'),
        db.UniqueConstraint('tournament_id', 'player_id', name='uq_tournament_participant_player'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'tournament_id': self.tournament_id,
            'player_id': self.player_id,
            'partner_id': self.partner_id,
            'seed': self.seed,
            'status': self.status,
            'eliminated_round': self.eliminated_round,
        }


class TournamentMatch(db.Model):
    """One bracket match; links to later matches are stored as match ids."""
    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(db.Integer, db.ForeignKey('tournament.id'), nullable=False)
    match_number = db.Column(db.Integer, nullable=False)
    round_number = db.Column(db.Integer, nullable=False)
    match_order_in_round = db.Column(db.Integer, nullable=False)
    bracket_type = db.Column(db.String(20), default=WINNERS, nullable=False)
    # winners, losers, grand_final
    player_1_id = db.Column(db.Integer, nullable=True)
    player_2_id = db.Column(db.Integer, nullable=True)
    player_1_partner_id = db.Column(db.Integer, nullable=True)
    player_2_partner_id = db.Column(db.Integer, nullable=True)
    player_1_seed = db.Column(db.Integer, nullable=True)
    player_2_seed = db.Column(db.Integer, nullable=True)
    player_1_score = db.Column(db.Integer, default=0)
    player_2_score = db.Column(db.Integer, default=0)
    winner_id = db.Column(db.Integer, nullable=True)
    is_bye = db.Column(db.Boolean, default=False)
    status = db.Column(db.String(20), default='pending')
    # pending, ready, in_progress, completed
    started_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    next_winner_match_id = db.Column(db.Integer, nullable=True)
    next_winner_slot = db.Column(db.String(10), nullable=True)
    next_loser_match_id = db.Column(db.Integer, nullable=True)
    next_loser_slot = db.Column(db.String(10), nullable=True)

    __table_args__ = (
        db.UniqueConstraint('tournament_id', 'match_number', name='uq_tournament_match_number'),
        db.Index('ix_tournament_match_section_round', 'tournament_id', 'bracket_type', 'round_number'),
    )

    games = db.relationship(
        'TournamentGame',
        backref='match',
        order_by='TournamentGame.game_number',
        cascade='all, delete-orphan',
    )

    def slot_player(self, slot):
        return getattr(self, f'{slot}_id')

    def slot_entry(self, slot):
        """(player id, partner id, seed) currently held in ``slot``."""
        return (
            getattr(self, f'{slot}_id'),
            getattr(self, f'{slot}_partner_id'),
            getattr(self, f'{slot}_seed'),
        )

    def slot_of(self, player_id):
        if player_id is None:
            return None
        for slot in SLOTS:
            if self.slot_player(slot) == player_id:
                return slot
        return None

    def to_dict(self):
        return {
            'id': self.id,
            'tournament_id': self.tournament_id,
            'match_number': self.match_number,
            'round_number': self.round_number,
            'match_order_in_round': self.match_order_in_round,
            'bracket_type': self.bracket_type,
            'player_1_id': self.player_1_id,
            'player_2_id': self.player_2_id,
            'player_1_partner_id': self.player_1_partner_id,
            'player_2_partner_id': self.player_2_partner_id,
            'player_1_seed': self.player_1_seed,
            'player_2_seed': self.player_2_seed,
            'player_1_score': self.player_1_score,
            'player_2_score': self.player_2_score,
            'winner_id': self.winner_id,
            'is_bye': self.is_bye,
            'status': self.status,
            'started_at': isoformat_or_none(self.started_at),
            'completed_at': isoformat_or_none(self.completed_at),
            'next_winner_match_id': self.next_winner_match_id,
            'next_winner_slot': self.next_winner_slot,
            'next_loser_match_id': self.next_loser_match_id,
            'next_loser_slot': self.next_loser_slot,
        }


class TournamentGame(db.Model):
    """A single game won inside a tournament match."""
    id = db.Column(db.Integer, primary_key=True)
    match_id = db.Column(db.Integer, db.ForeignKey('tournament_match.id'), nullable=False)
    game_number = db.Column(db.Integer, nullable=False)
    winner_id = db.Column(db.Integer, nullable=False)
    completed_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    def to_dict(self):
        return {
            'id': self.id,
            'match_id': self.match_id,
            'game_number': self.game_number,
            'winner_id': self.winner_id,
            'completed_at': isoformat_or_none(self.completed_at),
        }
