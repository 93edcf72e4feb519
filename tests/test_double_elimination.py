"""End-to-end double-elimination runs."""
from rackbracket.models import (
    TournamentMatch, TournamentParticipant, DOUBLE_ELIMINATION, WINNERS, LOSERS, GRAND_FINAL,
)
from rackbracket.services.tournaments import create_tournament, record_result, get_standings


def _create(players, count):
    return create_tournament(
        players[:count],
        tournament_format=DOUBLE_ELIMINATION,
        seeding_method='manual',
    )


def _match(store, tournament, number):
    return store.first(TournamentMatch, tournament_id=tournament.id, match_number=number)


def _seed_of(players, player_id):
    return players.index(player_id) + 1


def _play_out(store, tournament, players):
    """Decide every ready match in favour of the lower seed until none is left."""
    decided = 0
    while True:
        ready = store.query(
            TournamentMatch,
            order_by=('match_number',),
            tournament_id=tournament.id,
            status='ready',
        )
        if not ready:
            return decided
        match = ready[0]
        winner = min(
            (match.player_1_id, match.player_2_id),
            key=lambda pid: _seed_of(players, pid),
        )
        record_result(match.id, winner)
        decided += 1


def test_four_player_run_with_favourites_winning(store, players):
    tournament = _create(players, 4)
    assert tournament.losers_rounds == 2
    grand_final = _match(store, tournament, 6)
    assert grand_final.bracket_type == GRAND_FINAL
    assert grand_final.round_number == 3

    record_result(_match(store, tournament, 1).id, players[0])
    record_result(_match(store, tournament, 2).id, players[1])
    losers_one = _match(store, tournament, 4)
    assert (losers_one.player_1_id, losers_one.player_2_id) == (players[3], players[2])
    assert losers_one.status == 'ready'

    record_result(losers_one.id, players[2])
    fourth = store.first(TournamentParticipant, tournament_id=tournament.id, player_id=players[3])
    assert (fourth.status, fourth.eliminated_round) == ('eliminated', 1)

    record_result(_match(store, tournament, 3).id, players[0])
    losers_final = _match(store, tournament, 5)
    assert (losers_final.player_1_id, losers_final.player_2_id) == (players[2], players[1])
    second = store.first(TournamentParticipant, tournament_id=tournament.id, player_id=players[1])
    assert second.status == 'active'

    record_result(losers_final.id, players[1])
    assert (grand_final.player_1_id, grand_final.player_2_id) == (players[0], players[1])

    record_result(grand_final.id, players[0])
    assert tournament.status == 'completed'
    assert tournament.champion_id == players[0]
    assert [row['seed'] for row in get_standings(tournament.id)] == [1, 2, 3, 4]


def test_losers_bracket_winner_takes_the_grand_final(store, players):
    tournament = _create(players, 4)
    for number, winner in ((1, 0), (2, 1), (4, 2), (3, 0), (5, 2)):
        record_result(_match(store, tournament, number).id, players[winner])

    grand_final = _match(store, tournament, 6)
    record_result(grand_final.id, players[2])
    assert tournament.champion_id == players[2]
    top_seed = store.first(TournamentParticipant, tournament_id=tournament.id, player_id=players[0])
    assert (top_seed.status, top_seed.eliminated_round) == ('eliminated', 3)
    assert len(store.query(TournamentMatch, tournament_id=tournament.id)) == 6


def test_two_player_double_elimination_uses_winners_final_loser(store, players):
    tournament = _create(players, 2)
    assert len(store.query(TournamentMatch, tournament_id=tournament.id)) == 2

    record_result(_match(store, tournament, 1).id, players[1])
    grand_final = _match(store, tournament, 2)
    assert (grand_final.player_1_id, grand_final.player_2_id) == (players[1], players[0])
    assert grand_final.round_number == 1

    record_result(grand_final.id, players[0])
    assert tournament.champion_id == players[0]


def test_five_player_run_resolves_losers_byes(store, players):
    tournament = _create(players, 5)
    matches = store.query(TournamentMatch, order_by=('match_number',), tournament_id=tournament.id)
    assert len(matches) == 14
    assert [m.match_number for m in matches if m.bracket_type == LOSERS and m.is_bye] == [8, 9, 11]
    assert _match(store, tournament, 14).round_number == 5

    decided = _play_out(store, tournament, players)
    assert tournament.status == 'completed'
    assert tournament.champion_id == players[0]

    # void losers match never receives anyone
    void = _match(store, tournament, 9)
    assert (void.player_1_id, void.player_2_id, void.status) == (None, None, 'pending')

    completed = [m for m in store.query(TournamentMatch, tournament_id=tournament.id)
                 if m.status == 'completed' and not m.is_bye]
    assert len(completed) == decided == 8
    assert [row['seed'] for row in get_standings(tournament.id)] == [1, 2, 3, 4, 5]


def test_every_entrant_but_the_champion_loses_twice(store, players):
    tournament = _create(players, 6)
    _play_out(store, tournament, players)
    assert tournament.status == 'completed'

    standings = get_standings(tournament.id)
    for row in standings:
        if row['player_id'] == tournament.champion_id:
            assert row['losses'] == 0
        else:
            assert row['losses'] == 2
    winners_matches = [
        m for m in store.query(TournamentMatch, tournament_id=tournament.id)
        if m.bracket_type == WINNERS and not m.is_bye
    ]
    assert all(m.status == 'completed' for m in winners_matches)
