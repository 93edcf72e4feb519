"""
Result advancement along the match graph.

Deciding a match copies the winner (and, in double elimination, the loser)
into the linked slots, eliminates whoever just ran out of lives, resolves any
bye that became decidable and finally checks for a champion.  All of it runs
inside one store transaction so a match is never left completed without its
consequences.
"""
import logging

from rackbracket.errors import InvalidAdvance, NotFound
from rackbracket.models import (
    Tournament, TournamentMatch, TournamentParticipant, WINNERS, PLAYER_1, PLAYER_2,
)
from rackbracket.services.completion import check_completion
from rackbracket.services.match_state import (
    MatchState, FILL, START, DECIDE, AUTO_ADVANCE,
    apply_event, awaiting_bye, state_of,
)
from rackbracket.time_utils import utcnow_naive

logger = logging.getLogger(__name__)

_DECIDABLE = (MatchState.READY, MatchState.IN_PROGRESS)


def other_slot(slot):
    return PLAYER_2 if slot == PLAYER_1 else PLAYER_1


def load_match(store, match_id):
    match = store.get(TournamentMatch, match_id)
    if match is None:
        raise NotFound('Match not found', match_id=match_id)
    return match


def eliminates_loser(tournament, match):
    """Losing here costs the last life: any single-elim or non-winners match."""
    return not (tournament.is_double_elimination and match.bracket_type == WINNERS)


def loser_of(match):
    winner_slot = match.slot_of(match.winner_id)
    if winner_slot is None:
        return None
    return match.slot_player(other_slot(winner_slot))


def _copy_into(store, source, source_slot, target_id, target_slot):
    target = store.get(TournamentMatch, target_id)
    player_id, partner_id, seed = source.slot_entry(source_slot)
    if target.slot_player(target_slot) is not None:
        raise InvalidAdvance(
            'Target slot is already occupied',
            match_id=target.id,
            slot=target_slot,
        )
    apply_event(target, FILL)
    setattr(target, f'{target_slot}_id', player_id)
    setattr(target, f'{target_slot}_partner_id', partner_id)
    setattr(target, f'{target_slot}_seed', seed)
    logger.debug('Match %s: %s moves into match %s %s', source.id, player_id, target.id, target_slot)
    return target


def _eliminate(store, tournament, player_id, round_number):
    participant = store.first(
        TournamentParticipant,
        tournament_id=tournament.id,
        player_id=player_id,
    )
    if participant is None:
        return
    participant.status = 'eliminated'
    participant.eliminated_round = round_number
    logger.debug('Tournament %s: player %s eliminated in round %s', tournament.id, player_id, round_number)


def apply_consequences(store, tournament, match):
    """Propagate a decided match through its winner/loser links."""
    winner_slot = match.slot_of(match.winner_id)
    loser_slot = other_slot(winner_slot)
    loser_id = match.slot_player(loser_slot)
    touched = []

    if match.next_winner_match_id is not None:
        touched.append(_copy_into(
            store, match, winner_slot,
            match.next_winner_match_id, match.next_winner_slot,
        ))

    if (
        tournament.is_double_elimination
        and match.next_loser_match_id is not None
        and loser_id is not None
    ):
        touched.append(_copy_into(
            store, match, loser_slot,
            match.next_loser_match_id, match.next_loser_slot,
        ))

    if loser_id is not None and eliminates_loser(tournament, match):
        _eliminate(store, tournament, loser_id, match.round_number)

    for target in touched:
        if awaiting_bye(target):
            _resolve_bye(store, tournament, target)


def _resolve_bye(store, tournament, match):
    occupant_slot = PLAYER_1 if match.player_1_id is not None else PLAYER_2
    apply_event(match, AUTO_ADVANCE)
    match.winner_id = match.slot_player(occupant_slot)
    match.completed_at = utcnow_naive()
    logger.debug('Match %s: bye, %s advances automatically', match.id, match.winner_id)
    apply_consequences(store, tournament, match)


def settle_initial_byes(store, tournament, matches):
    """Push winners of byes completed at creation into their next matches."""
    for match in matches:
        if match.is_bye and match.status == 'completed' and match.winner_id is not None:
            apply_consequences(store, tournament, match)
    check_completion(store, tournament)


def start_match(store, match_id):
    with store.transaction():
        match = load_match(store, match_id)
        if state_of(match) not in _DECIDABLE:
            raise InvalidAdvance(
                'Only a ready match can be started',
                match_id=match.id,
                status=match.status,
            )
        apply_event(match, START)
        if match.started_at is None:
            match.started_at = utcnow_naive()
    return match


def advance(store, match_id, winner_id, player_1_score=None, player_2_score=None):
    """Record ``winner_id`` as winner of ``match_id`` and propagate the result."""
    with store.transaction():
        match = load_match(store, match_id)
        if match.status == 'completed':
            if match.winner_id == winner_id:
                return match
            raise InvalidAdvance(
                'Match already has a different winner',
                match_id=match.id,
                winner_id=match.winner_id,
            )
        if state_of(match) not in _DECIDABLE:
            raise InvalidAdvance(
                'Match is not ready to be decided',
                match_id=match.id,
                status=match.status,
            )
        if match.slot_of(winner_id) is None:
            raise InvalidAdvance(
                'Winner must be one of the players in this match',
                match_id=match.id,
                winner_id=winner_id,
            )

        tournament = store.get(Tournament, match.tournament_id)
        if player_1_score is not None:
            match.player_1_score = player_1_score
        if player_2_score is not None:
            match.player_2_score = player_2_score

        apply_event(match, DECIDE)
        match.winner_id = winner_id
        match.completed_at = utcnow_naive()
        apply_consequences(store, tournament, match)
        check_completion(store, tournament)

    logger.info('Match %s decided, winner %s', match.id, winner_id)
    return match
