"""Tests for the tournament HTTP routes."""
import json


def _create(client, participant_ids, **extra):
    payload = {'participant_ids': participant_ids, 'seeding_method': 'manual', 'name': 'Friday 8-Ball'}
    payload.update(extra)
    return client.post('/api/tournaments', json=payload)


def _matches(tournament_data, section='winners'):
    return [
        match
        for round_data in tournament_data['bracket']['sections'][section]
        for match in round_data['matches']
    ]


def test_health(client):
    res = client.get('/api/health')
    assert res.status_code == 200
    assert json.loads(res.data) == {'status': 'ok'}


def test_create_tournament_returns_bracket(client, players):
    res = _create(client, players[:5])
    assert res.status_code == 201
    data = json.loads(res.data)['tournament']

    assert data['name'] == 'Friday 8-Ball'
    assert data['status'] == 'in_progress'
    assert data['bracket_size'] == 8
    assert [p['seed'] for p in data['participants']] == [1, 2, 3, 4, 5]

    rounds = data['bracket']['sections']['winners']
    assert [r['label'] for r in rounds] == ['Quarter-Finals', 'Semi-Finals', 'Final']
    first_round = rounds[0]['matches']
    assert [m['is_bye'] for m in first_round] == [True, False, True, True]
    assert first_round[1]['player_1_name'] == 'Player 4'
    assert data['bracket']['progress']['total_playable_matches'] == 4
    assert data['bracket']['total_matches'] == 7


def test_create_double_elimination_has_all_sections(client, players):
    res = _create(client, players[:4], format='double_elimination')
    assert res.status_code == 201
    sections = json.loads(res.data)['tournament']['bracket']['sections']
    assert set(sections) == {'winners', 'losers', 'grand_final'}
    assert [r['label'] for r in sections['losers']] == ['Losers Round 1', 'Losers Round 2']
    assert sections['grand_final'][0]['label'] == 'Grand Final'


def test_create_tournament_rejects_bad_input(client, players):
    res = client.post('/api/tournaments', json={'participant_ids': []})
    assert res.status_code == 400

    res = client.post('/api/tournaments', json={'participant_ids': 'all'})
    assert res.status_code == 400

    res = _create(client, [players[0], 987654])
    assert res.status_code == 400
    assert json.loads(res.data)['player_ids'] == [987654]

    res = _create(client, players[:3], format='swiss')
    assert res.status_code == 400


def test_result_undo_and_standings_flow(client, players):
    data = json.loads(_create(client, players[:4]).data)['tournament']
    tournament_id = data['id']
    first, second, final = _matches(data)

    res = client.post(f"/api/tournaments/matches/{first['id']}/result", json={
        'winner_id': players[0], 'player_1_score': 7, 'player_2_score': 4,
    })
    assert res.status_code == 200
    body = json.loads(res.data)
    assert body['match']['status'] == 'completed'
    assert body['match']['player_1_score'] == 7

    res = client.post(f"/api/tournaments/matches/{first['id']}/result", json={'winner_id': players[3]})
    assert res.status_code == 409

    client.post(f"/api/tournaments/matches/{second['id']}/result", json={'winner_id': players[1]})
    res = client.post(f"/api/tournaments/matches/{final['id']}/start")
    assert res.status_code == 200
    assert json.loads(res.data)['match']['status'] == 'in_progress'

    res = client.post(f"/api/tournaments/matches/{first['id']}/undo")
    assert res.status_code == 409
    assert json.loads(res.data)['reason'] == 'next_match_started'

    res = client.post(f"/api/tournaments/matches/{final['id']}/result", json={'winner_id': players[1]})
    body = json.loads(res.data)
    assert body['tournament']['status'] == 'completed'
    assert body['tournament']['champion_id'] == players[1]

    res = client.get(f'/api/tournaments/{tournament_id}/standings')
    standings = json.loads(res.data)['standings']
    assert [row['player_id'] for row in standings[:2]] == [players[1], players[0]]
    assert standings[0]['display_name'] == 'Player 2'
    assert standings[0]['wins'] == 2

    res = client.post(f"/api/tournaments/matches/{final['id']}/undo")
    assert res.status_code == 200
    assert json.loads(res.data)['tournament']['status'] == 'in_progress'


def test_game_routes(client, players):
    data = json.loads(_create(
        client, players[:2], match_format='race_to', match_format_target=2,
    ).data)['tournament']
    match_id = _matches(data)[0]['id']

    for winner in (players[0], players[1], players[0]):
        res = client.post(f'/api/tournaments/matches/{match_id}/games', json={'winner_id': winner})
        assert res.status_code == 200
    body = json.loads(res.data)
    assert body['match']['status'] == 'completed'
    assert body['tournament']['champion_id'] == players[0]

    res = client.get(f'/api/tournaments/matches/{match_id}')
    assert [g['winner_id'] for g in json.loads(res.data)['match']['games']] == [
        players[0], players[1], players[0],
    ]

    res = client.delete(f'/api/tournaments/matches/{match_id}/games/last')
    assert res.status_code == 200
    match = json.loads(res.data)['match']
    assert (match['status'], match['player_1_score'], match['player_2_score']) == ('in_progress', 1, 1)


def test_missing_resources_return_404(client):
    assert client.get('/api/tournaments/4242').status_code == 404
    assert client.get('/api/tournaments/4242/standings').status_code == 404
    res = client.post('/api/tournaments/matches/4242/result', json={'winner_id': 1})
    assert res.status_code == 404
    assert json.loads(res.data)['error'] == 'Match not found'
