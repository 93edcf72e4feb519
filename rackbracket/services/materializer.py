"""Bind seeded players into bracket shells and persist the match graph."""
import logging

from rackbracket.models import TournamentMatch
from rackbracket.services.match_state import (
    MatchState, FILL, AUTO_ADVANCE, transition, status_for,
)
from rackbracket.time_utils import utcnow_naive

logger = logging.getLogger(__name__)


def _initial_state(entries, is_bye):
    state = MatchState.EMPTY
    for entry in entries:
        if entry is not None:
            state = transition(state, FILL)
    if is_bye and state is MatchState.AWAITING_OPPONENT:
        state = transition(state, AUTO_ADVANCE)
    return state


def materialize_matches(store, tournament_id, shells, seeds):
    """Create one TournamentMatch per shell and wire the links by id.

    Round-one byes holding a single player come back already completed with
    that player as winner; propagating the win is the advancement engine's
    job.
    """
    seed_map = {entry.seed: entry for entry in seeds}
    now = utcnow_naive()
    matches = []

    for shell in shells:
        entry_1 = seed_map.get(shell.seed_1) if shell.seed_1 else None
        entry_2 = seed_map.get(shell.seed_2) if shell.seed_2 else None
        state = _initial_state((entry_1, entry_2), shell.is_bye)

        winner_id = None
        if state is MatchState.COMPLETED:
            winner_id = (entry_1 or entry_2).player_id

        matches.append(TournamentMatch(
            tournament_id=tournament_id,
            match_number=shell.match_number,
            round_number=shell.round_number,
            match_order_in_round=shell.match_order_in_round,
            bracket_type=shell.bracket_type,
            player_1_id=entry_1.player_id if entry_1 else None,
            player_2_id=entry_2.player_id if entry_2 else None,
            player_1_partner_id=entry_1.partner_id if entry_1 else None,
            player_2_partner_id=entry_2.partner_id if entry_2 else None,
            player_1_seed=entry_1.seed if entry_1 else None,
            player_2_seed=entry_2.seed if entry_2 else None,
            player_1_score=0,
            player_2_score=0,
            winner_id=winner_id,
            is_bye=shell.is_bye,
            status=status_for(state),
            completed_at=now if winner_id is not None else None,
            next_winner_slot=shell.next_winner_slot,
            next_loser_slot=shell.next_loser_slot,
        ))

    store.bulk_insert(matches)

    id_by_number = {match.match_number: match.id for match in matches}
    for shell, match in zip(shells, matches):
        if shell.next_winner_match is not None:
            match.next_winner_match_id = id_by_number[shell.next_winner_match]
        if shell.next_loser_match is not None:
            match.next_loser_match_id = id_by_number[shell.next_loser_match]
    store.session.flush()

    logger.debug(
        'Materialized %d matches for tournament %s (%d byes)',
        len(matches), tournament_id, sum(1 for match in matches if match.is_bye),
    )
    return matches
