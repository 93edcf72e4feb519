"""Undo of a single advancement, refused when anything downstream moved on."""
import logging

from rackbracket.errors import IrreversibleAdvance
from rackbracket.models import (
    Tournament, TournamentMatch, TournamentParticipant, PLAYER_1, PLAYER_2,
)
from rackbracket.services.advancement import eliminates_loser, load_match, loser_of
from rackbracket.services.match_state import (
    MatchState, CLEAR, REOPEN, UNDO_BYE, apply_event, state_of,
)

logger = logging.getLogger(__name__)

_PROGRESSED = ('in_progress', 'completed')


def _links(tournament, match):
    """(target id, slot, refusal reason) for every slot this match filled."""
    links = []
    if match.next_winner_match_id is not None:
        links.append((
            match.next_winner_match_id,
            match.next_winner_slot,
            IrreversibleAdvance.NEXT_MATCH_STARTED,
        ))
    if (
        tournament.is_double_elimination
        and match.next_loser_match_id is not None
        and loser_of(match) is not None
    ):
        links.append((
            match.next_loser_match_id,
            match.next_loser_slot,
            IrreversibleAdvance.LOSERS_MATCH_STARTED,
        ))
    return links


def plan_reversal(store, tournament, match, reason=None):
    """Matches to undo, furthest downstream first.

    Auto-resolved byes fed by this match are undone with it; any other
    progressed target makes the whole reversal fail before a single write.
    A refusal found behind a bye reports the reason of the link that led
    into the bye chain.
    """
    plan = []
    for target_id, _, link_reason in _links(tournament, match):
        link_reason = reason or link_reason
        target = store.get(TournamentMatch, target_id)
        if target is None or target.status not in _PROGRESSED:
            continue
        if target.is_bye and target.status == 'completed':
            plan.extend(plan_reversal(store, tournament, target, link_reason))
            continue
        raise IrreversibleAdvance(link_reason, match_id=target.id)
    plan.append(match)
    return plan


def _clear_slot(store, target_id, slot):
    target = store.get(TournamentMatch, target_id)
    apply_event(target, CLEAR)
    setattr(target, f'{slot}_id', None)
    setattr(target, f'{slot}_partner_id', None)
    setattr(target, f'{slot}_seed', None)


def _restore(store, tournament, player_id):
    participant = store.first(
        TournamentParticipant,
        tournament_id=tournament.id,
        player_id=player_id,
    )
    if participant is not None and participant.status == 'eliminated':
        participant.status = 'active'
        participant.eliminated_round = None


def _scores_from_games(match):
    scores = {PLAYER_1: 0, PLAYER_2: 0}
    for game in match.games:
        slot = match.slot_of(game.winner_id)
        if slot is not None:
            scores[slot] += 1
    return scores


def _undo_one(store, tournament, match, reopen):
    for target_id, slot, _ in _links(tournament, match):
        _clear_slot(store, target_id, slot)

    loser_id = loser_of(match)
    if loser_id is not None and eliminates_loser(tournament, match):
        _restore(store, tournament, loser_id)

    apply_event(match, REOPEN if reopen else UNDO_BYE)
    match.winner_id = None
    match.completed_at = None
    # scores go back to what the recorded games support
    scores = _scores_from_games(match)
    match.player_1_score = scores[PLAYER_1]
    match.player_2_score = scores[PLAYER_2]


def reverse(store, match_id):
    """Inverse of one ``advance`` call."""
    with store.transaction():
        match = load_match(store, match_id)
        if match.status != 'completed':
            if state_of(match) is MatchState.IN_PROGRESS and match.winner_id is None:
                return match
            raise IrreversibleAdvance(IrreversibleAdvance.NO_RESULT, match_id=match.id)

        tournament = store.get(Tournament, match.tournament_id)
        plan = plan_reversal(store, tournament, match)
        for step in plan:
            _undo_one(store, tournament, step, reopen=step is match)

        if tournament.status == 'completed':
            tournament.status = 'in_progress'
            tournament.champion_id = None
            tournament.champion_partner_id = None
            tournament.completed_at = None

    logger.info('Match %s result undone (%d matches reopened)', match.id, len(plan))
    return match
