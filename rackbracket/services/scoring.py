"""Game-by-game scoring inside a tournament match."""
import logging
import math

from rackbracket.errors import InvalidAdvance
from rackbracket.models import Tournament, TournamentGame, PLAYER_1
from rackbracket.services.advancement import advance, load_match, start_match
from rackbracket.services.match_state import MatchState, state_of
from rackbracket.services.reversal import reverse
from rackbracket.time_utils import utcnow_naive

logger = logging.getLogger(__name__)


def games_needed(match_format, target):
    if match_format == 'single':
        return 1
    if match_format == 'race_to' and target:
        return target
    if match_format == 'best_of' and target:
        return math.ceil(target / 2)
    return None


def check_match_complete(player_1_score, player_2_score, match_format, target=None):
    needed = games_needed(match_format, target)
    if needed is None:
        return False
    return player_1_score >= needed or player_2_score >= needed


def record_game(store, match_id, winner_id):
    """Add one game won by ``winner_id``; decides the match once it is won."""
    with store.transaction():
        match = load_match(store, match_id)
        state = state_of(match)
        if state not in (MatchState.READY, MatchState.IN_PROGRESS):
            raise InvalidAdvance(
                'Games can only be recorded on a ready or running match',
                match_id=match.id,
                status=match.status,
            )
        winner_slot = match.slot_of(winner_id)
        if winner_slot is None:
            raise InvalidAdvance(
                'Winner must be one of the players in this match',
                match_id=match.id,
                winner_id=winner_id,
            )
        if state is MatchState.READY:
            start_match(store, match.id)

        store.session.add(TournamentGame(
            match_id=match.id,
            game_number=len(match.games) + 1,
            winner_id=winner_id,
            completed_at=utcnow_naive(),
        ))
        if winner_slot == PLAYER_1:
            match.player_1_score = (match.player_1_score or 0) + 1
        else:
            match.player_2_score = (match.player_2_score or 0) + 1

        tournament = store.get(Tournament, match.tournament_id)
        if check_match_complete(
            match.player_1_score,
            match.player_2_score,
            tournament.match_format,
            tournament.match_format_target,
        ):
            advance(store, match.id, winner_id)
    return match


def undo_last_game(store, match_id):
    """Remove the most recent game, reversing the match result first if needed."""
    with store.transaction():
        match = load_match(store, match_id)
        if not match.games:
            raise InvalidAdvance('No games to undo', match_id=match.id)

        if match.status == 'completed':
            reverse(store, match.id)

        last_game = match.games[-1]
        if match.slot_of(last_game.winner_id) == PLAYER_1:
            match.player_1_score = max(0, (match.player_1_score or 0) - 1)
        else:
            match.player_2_score = max(0, (match.player_2_score or 0) - 1)
        store.delete(last_game)
    logger.debug('Match %s: last game removed', match.id)
    return match
