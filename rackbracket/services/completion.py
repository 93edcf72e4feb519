"""Champion detection."""
import logging

from rackbracket.models import TournamentMatch, TournamentParticipant, WINNERS, GRAND_FINAL
from rackbracket.time_utils import utcnow_naive

logger = logging.getLogger(__name__)


def terminal_match(store, tournament):
    """The match whose winner is champion: grand final, or the last winners round."""
    if tournament.is_double_elimination:
        return store.first(
            TournamentMatch,
            tournament_id=tournament.id,
            bracket_type=GRAND_FINAL,
        )
    if not tournament.winners_rounds:
        return None
    return store.first(
        TournamentMatch,
        tournament_id=tournament.id,
        bracket_type=WINNERS,
        round_number=tournament.winners_rounds,
    )


def _crown(store, tournament, champion_id, partner_id):
    store.update(
        type(tournament), tournament.id,
        status='completed',
        champion_id=champion_id,
        champion_partner_id=partner_id,
        completed_at=utcnow_naive(),
    )
    logger.info('Tournament %s complete, champion %s', tournament.id, champion_id)


def check_completion(store, tournament):
    """Crown the champion once the terminal match has a winner. Idempotent."""
    final = terminal_match(store, tournament)
    if final is None:
        if tournament.total_participants == 1 and tournament.status != 'completed':
            sole = store.first(TournamentParticipant, tournament_id=tournament.id)
            if sole is not None:
                _crown(store, tournament, sole.player_id, sole.partner_id)
        return tournament.status == 'completed'

    if final.status != 'completed' or final.winner_id is None:
        return False
    if tournament.status == 'completed' and tournament.champion_id == final.winner_id:
        return True

    winner_slot = final.slot_of(final.winner_id)
    partner_id = getattr(final, f'{winner_slot}_partner_id') if winner_slot else None
    _crown(store, tournament, final.winner_id, partner_id)
    return True
