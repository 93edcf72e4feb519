"""Tournament lifecycle: creation, results, undo and standings."""
import logging
from flask import current_app

from rackbracket.errors import InvalidInput, NotFound
from rackbracket.models import (
    Tournament, TournamentParticipant, TournamentMatch,
    TOURNAMENT_FORMATS, MATCH_FORMATS, SINGLE_ELIMINATION,
    WINNERS, LOSERS, GRAND_FINAL,
)
from rackbracket.profiles import ProfileLookup
from rackbracket.services import advancement, reversal, scoring
from rackbracket.services.bracket_shells import (
    build_bracket, next_power_of_2, winners_round_count, losers_round_count,
)
from rackbracket.services.materializer import materialize_matches
from rackbracket.services.seeding import assign_seeds
from rackbracket.services.standings import (
    calculate_standings, group_matches_by_round, round_label, tournament_progress,
)
from rackbracket.store import EntityStore
from rackbracket.time_utils import utcnow_naive

logger = logging.getLogger(__name__)


def _validate_options(tournament_format, match_format, match_format_target):
    if tournament_format not in TOURNAMENT_FORMATS:
        raise InvalidInput(f'Unknown tournament format: {tournament_format}')
    if match_format not in MATCH_FORMATS:
        raise InvalidInput(f'Unknown match format: {match_format}')
    if match_format != 'single':
        if not isinstance(match_format_target, int) or match_format_target < 1:
            raise InvalidInput(f'{match_format} needs a positive target')
        return match_format_target
    return None


def _validate_players(store, participant_ids, partner_ids):
    max_participants = current_app.config.get('MAX_PARTICIPANTS', 128)
    if len(participant_ids) > max_participants:
        raise InvalidInput(
            f'At most {max_participants} participants are allowed',
            participants=len(participant_ids),
        )
    wanted = set(participant_ids) | {pid for pid in partner_ids or [] if pid is not None}
    missing = wanted - ProfileLookup(store).existing_ids(wanted)
    if missing:
        raise InvalidInput('Unknown player ids', player_ids=sorted(missing))


def create_tournament(
    participant_ids,
    partner_ids=None,
    tournament_format=SINGLE_ELIMINATION,
    seeding_method=None,
    name=None,
    match_format=None,
    match_format_target=None,
    rng=None,
    store=None,
):
    """Seed the field, build the full match graph and settle round-one byes."""
    store = store or EntityStore()
    seeding_method = seeding_method or current_app.config.get('DEFAULT_SEEDING_METHOD', 'random')
    match_format = match_format or current_app.config.get('DEFAULT_MATCH_FORMAT', 'single')
    match_format_target = _validate_options(tournament_format, match_format, match_format_target)

    seeds = assign_seeds(participant_ids, partner_ids, seeding_method, rng=rng)
    _validate_players(store, participant_ids, partner_ids)
    shells = build_bracket(len(seeds), tournament_format)
    bracket_size = next_power_of_2(len(seeds))

    with store.transaction():
        tournament = Tournament(
            name=(str(name or '').strip() or 'Tournament')[:200],
            format=tournament_format,
            seeding_method=seeding_method,
            match_format=match_format,
            match_format_target=match_format_target,
            total_participants=len(seeds),
            bracket_size=bracket_size,
            winners_rounds=winners_round_count(len(seeds)),
            losers_rounds=(
                losers_round_count(bracket_size)
                if tournament_format != SINGLE_ELIMINATION else 0
            ),
            status='setup',
        )
        store.bulk_insert([tournament])
        store.bulk_insert(
            TournamentParticipant(
                tournament_id=tournament.id,
                player_id=entry.player_id,
                partner_id=entry.partner_id,
                seed=entry.seed,
                status='active',
            )
            for entry in seeds
        )
        matches = materialize_matches(store, tournament.id, shells, seeds)
        tournament.status = 'in_progress'
        tournament.started_at = utcnow_naive()
        advancement.settle_initial_byes(store, tournament, matches)

    logger.info(
        'Created tournament %s: %s, %d participants, bracket of %d',
        tournament.id, tournament_format, len(seeds), bracket_size,
    )
    return tournament


def get_tournament(tournament_id, store=None):
    store = store or EntityStore()
    tournament = store.get(Tournament, tournament_id)
    if tournament is None:
        raise NotFound('Tournament not found', tournament_id=tournament_id)
    return tournament


def get_match(match_id, store=None):
    return advancement.load_match(store or EntityStore(), match_id)


def start_match(match_id, store=None):
    return advancement.start_match(store or EntityStore(), match_id)


def record_result(match_id, winner_id, player_1_score=None, player_2_score=None, store=None):
    return advancement.advance(
        store or EntityStore(), match_id, winner_id,
        player_1_score=player_1_score, player_2_score=player_2_score,
    )


def undo_result(match_id, store=None):
    return reversal.reverse(store or EntityStore(), match_id)


def record_game(match_id, winner_id, store=None):
    return scoring.record_game(store or EntityStore(), match_id, winner_id)


def undo_last_game(match_id, store=None):
    return scoring.undo_last_game(store or EntityStore(), match_id)


def get_standings(tournament_id, store=None):
    store = store or EntityStore()
    tournament = get_tournament(tournament_id, store)
    participants = store.query(TournamentParticipant, order_by=('seed',), tournament_id=tournament.id)
    matches = store.query(TournamentMatch, order_by=('match_number',), tournament_id=tournament.id)
    ids = [p.player_id for p in participants] + [p.partner_id for p in participants]
    names = ProfileLookup(store).display_names(ids)
    return calculate_standings(participants, matches, names)


def bracket_state(tournament, store=None):
    """Serialized bracket grouped by section and round, for display."""
    store = store or EntityStore()
    matches = store.query(TournamentMatch, order_by=('match_number',), tournament_id=tournament.id)
    ids = []
    for match in matches:
        ids.extend([match.player_1_id, match.player_2_id, match.player_1_partner_id, match.player_2_partner_id])
    names = ProfileLookup(store).display_names(ids)

    sections = {}
    for bracket_type, total_rounds in (
        (WINNERS, tournament.winners_rounds),
        (LOSERS, tournament.losers_rounds),
        (GRAND_FINAL, 1),
    ):
        rounds = []
        for round_number, round_matches in group_matches_by_round(matches, bracket_type):
            serialized = []
            for match in round_matches:
                data = match.to_dict()
                data['player_1_name'] = names.get(match.player_1_id)
                data['player_2_name'] = names.get(match.player_2_id)
                serialized.append(data)
            rounds.append({
                'round': round_number,
                'label': round_label(round_number, total_rounds, bracket_type),
                'matches': serialized,
            })
        if rounds:
            sections[bracket_type] = rounds

    return {
        'sections': sections,
        'progress': tournament_progress(matches),
        'total_matches': len(matches),
    }


def serialize_tournament(tournament, store=None, include_bracket=True):
    data = tournament.to_dict(include_participants=True)
    if include_bracket:
        data['bracket'] = bracket_state(tournament, store)
    return data
