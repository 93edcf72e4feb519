"""Tests for standings, round labels and progress."""
from types import SimpleNamespace

from rackbracket.models import WINNERS, LOSERS, GRAND_FINAL
from rackbracket.services.standings import (
    calculate_standings, group_matches_by_round, round_label, tournament_progress,
)


def _participant(player_id, seed, status='active', eliminated_round=None, partner_id=None):
    return SimpleNamespace(
        player_id=player_id,
        partner_id=partner_id,
        seed=seed,
        status=status,
        eliminated_round=eliminated_round,
    )


def _match(number, round_number, status='pending', winner_id=None, player_1=None, player_2=None,
           is_bye=False, bracket_type=WINNERS, order=1):
    return SimpleNamespace(
        match_number=number,
        round_number=round_number,
        match_order_in_round=order,
        bracket_type=bracket_type,
        status=status,
        winner_id=winner_id,
        player_1_id=player_1,
        player_2_id=player_2,
        is_bye=is_bye,
    )


def test_standings_order_active_then_latest_elimination_then_seed():
    participants = [
        _participant(10, 1, 'eliminated', 2),
        _participant(20, 2, 'active'),
        _participant(30, 3, 'eliminated', 1),
        _participant(40, 4, 'eliminated', 2),
        _participant(50, 5, 'eliminated', 3),
    ]
    rows = calculate_standings(participants, [], names={20: 'Efren'})

    assert [row['player_id'] for row in rows] == [20, 50, 10, 40, 30]
    assert [row['placement'] for row in rows] == [1, 2, 3, 4, 5]
    assert rows[0]['display_name'] == 'Efren'
    assert rows[1]['display_name'] is None


def test_standings_count_wins_and_losses_but_not_byes():
    participants = [_participant(1, 1), _participant(2, 2), _participant(3, 3, 'eliminated', 1)]
    matches = [
        _match(1, 1, 'completed', winner_id=1, player_1=1, is_bye=True),
        _match(2, 1, 'completed', winner_id=2, player_1=2, player_2=3),
        _match(3, 2, 'ready', player_1=1, player_2=2),
    ]
    rows = {row['player_id']: row for row in calculate_standings(participants, matches)}

    assert (rows[1]['wins'], rows[1]['losses']) == (0, 0)
    assert (rows[2]['wins'], rows[2]['losses']) == (1, 0)
    assert (rows[3]['wins'], rows[3]['losses']) == (0, 1)


def test_round_labels():
    assert round_label(4, 4, WINNERS) == 'Final'
    assert round_label(3, 4, WINNERS) == 'Semi-Finals'
    assert round_label(2, 4, WINNERS) == 'Quarter-Finals'
    assert round_label(1, 4, WINNERS) == 'Round 1'
    assert round_label(3, 6, LOSERS) == 'Losers Round 3'
    assert round_label(7, 6, GRAND_FINAL) == 'Grand Final'


def test_group_matches_by_round_filters_section_and_sorts():
    matches = [
        _match(3, 2, order=1),
        _match(2, 1, order=2),
        _match(1, 1, order=1),
        _match(4, 1, bracket_type=LOSERS),
    ]
    grouped = group_matches_by_round(matches, WINNERS)
    assert [(round_number, [m.match_number for m in ms]) for round_number, ms in grouped] == [
        (1, [1, 2]),
        (2, [3]),
    ]
    assert group_matches_by_round(matches, GRAND_FINAL) == []


def test_progress_ignores_byes_and_tracks_current_round():
    matches = [
        _match(1, 1, 'completed', is_bye=True),
        _match(2, 1, 'completed'),
        _match(3, 2, 'ready'),
        _match(4, 3),
    ]
    progress = tournament_progress(matches)
    assert progress == {
        'current_round': 2,
        'completed_matches': 1,
        'total_matches': 4,
        'total_playable_matches': 3,
        'is_complete': False,
    }

    finished = [_match(1, 1, 'completed'), _match(2, 2, 'completed')]
    assert tournament_progress(finished)['is_complete']
    assert tournament_progress(finished)['current_round'] == 2
    assert not tournament_progress([])['is_complete']
